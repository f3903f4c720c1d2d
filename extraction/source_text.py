"""Line splitting and snippet helpers shared by both extractors."""

from typing import Iterable, List


def split_source_lines(text: str) -> List[str]:
    """Split source text on ``\\n`` only, the way tree-sitter counts rows.

    A trailing newline does not produce an extra empty line. Carriage
    returns are kept so snippets stay verbatim.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def join_snippet(lines: Iterable[str]) -> str:
    """Join raw lines into a snippet, each terminated by a newline."""
    return "".join(f"{line}\n" for line in lines)


def snippet_for_lines(lines: List[str], start_line: int, end_line: int) -> str:
    """Verbatim snippet for the 1-indexed inclusive range ``start_line..end_line``."""
    return join_snippet(lines[start_line - 1:end_line])

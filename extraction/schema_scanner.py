"""
Line-oriented scanner for top-level ``message``/``enum`` blocks in .proto files.

The scanner needs no grammar: it tracks the balance of ``{``/``}`` delimiters
line by line, ignoring delimiters inside ``//`` comments, single-line
``/* ... */`` comments and quoted literals. Nested blocks are part of the
outermost block's extent.

The state machine is the pure function ``scan_line``: it takes an immutable
``ScannerState`` and one line and returns the next state together with an
optional emitted element and an optional diagnostic. ``finish_scan`` handles
end of file.

Known limitation: comment and string state is not carried across lines, so a
multi-line ``/* ... */`` comment or string containing braces inside a block
desynchronizes the balance.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from extraction.config import (
    LINE_COMMENT_PREFIX,
    SCHEMA_BLOCK_START_RE,
    SCHEMA_PACKAGE_RE,
)
from extraction.diagnostics import Diagnostic, DiagnosticKind
from extraction.models import Element, ElementContext, ElementKind, FileExtractionResult
from extraction.source_text import join_snippet, split_source_lines

logger = logging.getLogger(__name__)

OPEN_DELIMITER = "{"
CLOSE_DELIMITER = "}"
_QUOTES = ("\"", "'")
_ESCAPE = "\\"


@dataclass(frozen=True)
class PendingComment:
    """A standalone ``//`` comment line seen while looking for a block."""

    line_number: int
    raw: str
    text: str


@dataclass(frozen=True)
class BlockDraft:
    """A block whose closing delimiter has not been reached yet."""

    kind: ElementKind
    name: str
    declaration_line: int
    start_line: int
    documentation: Optional[str]
    module: Optional[str]
    snippet_lines: Tuple[str, ...]


@dataclass(frozen=True)
class ScannerState:
    """Per-file scanner state.

    ``draft is None`` means SEEKING (balance is 0); otherwise IN_BLOCK.
    """

    file_path: str
    file_name: str
    brace_balance: int = 0
    pending_comments: Tuple[PendingComment, ...] = ()
    draft: Optional[BlockDraft] = None
    module_package: Optional[str] = None

    @property
    def in_block(self) -> bool:
        return self.draft is not None


@dataclass(frozen=True)
class ScanStep:
    """Result of feeding one line to the scanner."""

    state: ScannerState
    element: Optional[Element] = None
    diagnostic: Optional[Diagnostic] = None


def initial_state(file_path: str, file_name: str) -> ScannerState:
    """Fresh SEEKING state for one file."""
    return ScannerState(file_path=file_path, file_name=file_name)


def count_delimiters(
    text: str,
    open_char: str = OPEN_DELIMITER,
    close_char: str = CLOSE_DELIMITER,
) -> Tuple[int, int]:
    """Count opening and closing delimiters that are structural.

    Delimiters are skipped after ``//``, between ``/*`` and a ``*/`` on the
    same text, and inside ``"..."`` or ``'...'`` literals. A quote preceded
    by a backslash does not open or close a literal.

    Returns:
        ``(opens, closes)``
    """
    opens = closes = 0
    in_block_comment = False
    quote: Optional[str] = None
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        prev = text[i - 1] if i > 0 else ""

        if in_block_comment:
            if ch == "*" and i + 1 < n and text[i + 1] == "/":
                in_block_comment = False
                i += 2
            else:
                i += 1
            continue

        if quote is not None:
            if ch == quote and prev != _ESCAPE:
                quote = None
            i += 1
            continue

        if ch == "/" and i + 1 < n:
            if text[i + 1] == "/":
                break
            if text[i + 1] == "*":
                in_block_comment = True
                i += 2
                continue

        if ch in _QUOTES and prev != _ESCAPE:
            quote = ch
        elif ch == open_char:
            opens += 1
        elif ch == close_char:
            closes += 1
        i += 1

    return opens, closes


def _finalize(state: ScannerState, draft: BlockDraft, end_line: int) -> Element:
    element = Element(
        name=draft.name,
        kind=draft.kind,
        declaration_line=draft.declaration_line,
        start_line=draft.start_line,
        end_line=end_line,
        documentation=draft.documentation,
        context=ElementContext(
            module=draft.module,
            file_path=state.file_path,
            file_name=state.file_name,
            snippet=join_snippet(draft.snippet_lines),
        ),
    )
    logger.debug(
        f"Extracted {draft.kind.value}: {draft.name} at "
        f"{state.file_path}:{draft.start_line}-{end_line}"
    )
    return element


def _reset(state: ScannerState) -> ScannerState:
    return replace(state, brace_balance=0, pending_comments=(), draft=None)


def _mismatch_diagnostic(
    state: ScannerState, draft: BlockDraft, line_number: int
) -> Diagnostic:
    return Diagnostic(
        file_path=state.file_path,
        message=(
            f"Mismatched braces in {draft.kind.value.lower()} '{draft.name}' "
            f"starting at line {draft.start_line}; block discarded"
        ),
        kind=DiagnosticKind.UNBALANCED_BLOCK,
        line=line_number,
    )


def _open_block(
    state: ScannerState,
    match: "re.Match[str]",
    line: str,
    line_number: int,
) -> ScanStep:
    keyword, name = match.group(1), match.group(2)
    pending = state.pending_comments

    # The opener's own "{" is the 1; the rest of the line may open or close more
    opens, closes = count_delimiters(line[match.end():])
    balance = 1 + opens - closes

    documentation = None
    if pending:
        documentation = "\n".join(c.text for c in pending).strip() or None

    draft = BlockDraft(
        kind=ElementKind(keyword.capitalize()),
        name=name,
        declaration_line=line_number,
        start_line=line_number - len(pending),
        documentation=documentation,
        module=state.module_package,
        snippet_lines=tuple(c.raw for c in pending) + (line,),
    )

    if balance == 0:
        return ScanStep(_reset(state), element=_finalize(state, draft, line_number))
    if balance < 0:
        return ScanStep(
            _reset(state), diagnostic=_mismatch_diagnostic(state, draft, line_number)
        )
    return ScanStep(
        replace(state, brace_balance=balance, pending_comments=(), draft=draft)
    )


def _scan_seeking(state: ScannerState, line: str, line_number: int) -> ScanStep:
    trimmed = line.strip()

    if state.module_package is None:
        package_match = SCHEMA_PACKAGE_RE.match(trimmed)
        if package_match:
            state = replace(state, module_package=package_match.group(1))

    if trimmed.startswith(LINE_COMMENT_PREFIX):
        comment = PendingComment(
            line_number=line_number,
            raw=line,
            text=trimmed[len(LINE_COMMENT_PREFIX):].strip(),
        )
        return ScanStep(
            replace(state, pending_comments=state.pending_comments + (comment,))
        )

    start_match = SCHEMA_BLOCK_START_RE.match(line)
    if start_match:
        return _open_block(state, start_match, line, line_number)

    # Any other line, blank or directive included, ends the comment run
    if state.pending_comments:
        state = replace(state, pending_comments=())
    return ScanStep(state)


def _scan_in_block(state: ScannerState, line: str, line_number: int) -> ScanStep:
    draft = state.draft
    draft = replace(draft, snippet_lines=draft.snippet_lines + (line,))

    opens, closes = count_delimiters(line)
    balance = state.brace_balance + opens - closes

    if balance == 0:
        return ScanStep(_reset(state), element=_finalize(state, draft, line_number))
    if balance < 0:
        return ScanStep(
            _reset(state), diagnostic=_mismatch_diagnostic(state, draft, line_number)
        )
    return ScanStep(replace(state, brace_balance=balance, draft=draft))


def scan_line(state: ScannerState, line: str, line_number: int) -> ScanStep:
    """Feed one raw source line (without terminator) to the scanner.

    Args:
        state: Current scanner state.
        line: The raw line.
        line_number: 1-indexed line number.

    Returns:
        The next state plus the element completed on this line and/or the
        diagnostic raised by it, if any.
    """
    if state.in_block:
        return _scan_in_block(state, line, line_number)
    return _scan_seeking(state, line, line_number)


def finish_scan(state: ScannerState) -> Optional[Diagnostic]:
    """Report a block still open at end of file, or None."""
    if not state.in_block:
        return None
    draft = state.draft
    return Diagnostic(
        file_path=state.file_path,
        message=(
            f"Reached end of file with unclosed {draft.kind.value.lower()} "
            f"'{draft.name}' starting at line {draft.start_line}"
        ),
        kind=DiagnosticKind.UNTERMINATED_BLOCK,
    )


def scan_schema_lines(
    lines: List[str],
    file_path: str,
    file_name: str,
) -> FileExtractionResult:
    """Scan all lines of one schema file."""
    result = FileExtractionResult()
    state = initial_state(file_path, file_name)

    for line_number, line in enumerate(lines, start=1):
        step = scan_line(state, line, line_number)
        state = step.state
        if step.element is not None:
            result.elements.append(step.element)
        if step.diagnostic is not None:
            result.diagnostics.append(step.diagnostic)

    unterminated = finish_scan(state)
    if unterminated is not None:
        result.diagnostics.append(unterminated)

    logger.debug(
        f"Scanned {len(lines)} lines of {file_path}: "
        f"{len(result.elements)} blocks, {len(result.diagnostics)} problems"
    )
    return result


def scan_schema_source(text: str, file_path: str, file_name: str) -> FileExtractionResult:
    """Scan the full text of one schema file."""
    return scan_schema_lines(split_source_lines(text), file_path, file_name)

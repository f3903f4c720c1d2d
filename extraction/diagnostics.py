"""
Diagnostics for recoverable extraction failures.

Extractors return ``Diagnostic`` values alongside their elements; the
traversal driver collects them into one ``DiagnosticSink`` per run.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class DiagnosticKind(str, enum.Enum):
    """Category of a recoverable failure."""

    SYNTAX_ERROR = "syntax_error"
    RUNTIME_ERROR = "runtime_error"
    UNBALANCED_BLOCK = "unbalanced_block"
    UNTERMINATED_BLOCK = "unterminated_block"
    READ_ERROR = "read_error"
    TRAVERSAL_ERROR = "traversal_error"


@dataclass(frozen=True)
class Diagnostic:
    """One human-readable failure report."""

    file_path: str
    message: str
    kind: DiagnosticKind
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"ERROR: {self.message} (line {self.line}): {self.file_path}"
        return f"ERROR: {self.message}: {self.file_path}"


class DiagnosticSink:
    """Append-only collector of diagnostics for a whole run.

    Recording never raises; each entry is also logged at WARNING level.
    """

    def __init__(self) -> None:
        self._entries: List[Diagnostic] = []

    def record(self, diagnostic: Diagnostic) -> None:
        self._entries.append(diagnostic)
        logger.warning("%s", diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.record(diagnostic)

    @property
    def entries(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def lines(self) -> List[str]:
        """Render every diagnostic as one line."""
        return [str(d) for d in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._entries))

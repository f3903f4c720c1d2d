"""
Data models for extracted code elements.
"""

import enum
from dataclasses import dataclass, asdict, field
from typing import Optional, Dict, Any, List

from extraction.diagnostics import Diagnostic


class ElementKind(str, enum.Enum):
    """Kind of extracted element."""

    METHOD = "Method"
    MESSAGE = "Message"
    ENUM = "Enum"


@dataclass(frozen=True)
class ElementContext:
    """Where an element lives and its verbatim source.

    Attributes:
        file_path: Path relative to the traversal root, ``/``-separated
        file_name: Base name of the file
        snippet: Verbatim source lines from start_line to end_line, each
            terminated by a newline
        module: Java package or schema package, if declared
        enclosing_type_name: Nearest enclosing class/interface/enum/record
            (methods only)
    """

    file_path: str
    file_name: str
    snippet: str
    module: Optional[str] = None
    enclosing_type_name: Optional[str] = None


@dataclass(frozen=True)
class Element:
    """A single extracted method or schema block.

    Attributes:
        name: Method or block identifier
        kind: Method, Message or Enum
        declaration_line: 1-indexed line of the signature or block opener
        start_line: 1-indexed first line, including attached documentation
        end_line: 1-indexed line of the closing delimiter
        context: File location, enclosing scope and snippet
        signature: ``name(Type, ...)`` for methods, None for schema blocks
        documentation: Attached comment text with markers stripped, or None
    """

    name: str
    kind: ElementKind
    declaration_line: int
    start_line: int
    end_line: int
    context: ElementContext
    signature: Optional[str] = None
    documentation: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.start_line <= self.declaration_line <= self.end_line:
            raise ValueError(
                f"Invalid line range for {self.kind.value} '{self.name}': "
                f"start={self.start_line} declaration={self.declaration_line} "
                f"end={self.end_line}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the element to a dictionary suitable for JSON serialization.

        Optional fields that are absent are omitted rather than emitted as null.

        Returns:
            Dictionary representation of the element.
        """
        raw = asdict(self)
        context = {k: v for k, v in raw.pop("context").items() if v is not None}
        payload: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
        }
        if self.signature is not None:
            payload["signature"] = self.signature
        if self.documentation is not None:
            payload["documentation"] = self.documentation
        payload["declaration_line"] = self.declaration_line
        payload["start_line"] = self.start_line
        payload["end_line"] = self.end_line
        payload["context"] = context
        return payload


@dataclass
class FileExtractionResult:
    """Elements and diagnostics produced for one file.

    ``file_failed`` is set when the whole file was skipped (unreadable,
    syntax error, runtime failure); per-block schema problems leave it False.
    """

    elements: List[Element] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    file_failed: bool = False

"""
Configuration for code element extraction.

Defines the tree-sitter Java node type strings used for method extraction,
the schema scanner patterns, and the immutable ``ExtractionConfig`` value
passed to the traversal driver.
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Set, Tuple

from core.startup_config import ConfigValidationError, load_config_file

logger = logging.getLogger(__name__)


class SourceKind(str, enum.Enum):
    """Which extractor handles a file."""

    JAVA = "java"
    SCHEMA = "schema"


class DeclarationKind(str, enum.Enum):
    """Closed set of declaration kinds the Java traversal reacts to."""

    METHOD = "method"
    CONSTRUCTOR = "constructor"
    TYPE = "type"


# Java node types that declare a method-like member
METHOD_NODE: str = "method_declaration"
CONSTRUCTOR_NODE: str = "constructor_declaration"

# Java node types that declare a named enclosing type
TYPE_DECLARATION_TYPES: Set[str] = {
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
    "annotation_type_declaration",
}

# Node type -> declaration kind tag
DECLARATION_KIND_MAP: Dict[str, DeclarationKind] = {
    METHOD_NODE: DeclarationKind.METHOD,
    CONSTRUCTOR_NODE: DeclarationKind.CONSTRUCTOR,
    **{node_type: DeclarationKind.TYPE for node_type in TYPE_DECLARATION_TYPES},
}

PACKAGE_NODE: str = "package_declaration"

# Older grammars emit a single "comment" node type
COMMENT_NODES: Set[str] = {"block_comment", "line_comment", "comment"}

JAVADOC_PREFIX: str = "/**"

# Javadoc may sit at most this many rows above the declaration
MAX_JAVADOC_GAP_LINES: int = 1

# Parameter node types inside formal_parameters
FORMAL_PARAMETER_NODE: str = "formal_parameter"
SPREAD_PARAMETER_NODE: str = "spread_parameter"

# Schema (.proto) scanner patterns
SCHEMA_BLOCK_START_RE = re.compile(r"^\s*(message|enum)\s+([A-Za-z_]\w*)\s*\{")
SCHEMA_PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)\s*;")
LINE_COMMENT_PREFIX: str = "//"

DEFAULT_EXCLUDED_SEGMENTS: Tuple[str, ...] = (
    "build",
    "target",
    "out",
    "gradle/wrapper",
    "generated-sources",
    "generated",
    ".git",
    ".idea",
    ".vscode",
)

DEFAULT_EXTENSIONS: Dict[str, SourceKind] = {
    ".java": SourceKind.JAVA,
    ".proto": SourceKind.SCHEMA,
}

DEFAULT_INCLUDE_CONSTRUCTORS: bool = False


@dataclass(frozen=True)
class ExtractionConfig:
    """Resolved extraction settings for one run.

    Attributes:
        excluded_segments: Path segments (``/``-separated, relative to the
            root) whose presence anywhere in a file's path skips the file.
        extensions: File extension -> extractor kind.
        include_constructors: Whether Java constructors are emitted as methods.
    """

    excluded_segments: Tuple[str, ...] = DEFAULT_EXCLUDED_SEGMENTS
    extensions: Mapping[str, SourceKind] = field(
        default_factory=lambda: dict(DEFAULT_EXTENSIONS)
    )
    include_constructors: bool = DEFAULT_INCLUDE_CONSTRUCTORS

    def source_kind_for(self, file_name: str) -> Optional[SourceKind]:
        """Return the extractor kind for a file name, or None if unrecognized."""
        for ext, kind in self.extensions.items():
            if file_name.endswith(ext):
                return kind
        return None


def _normalize_segment(raw: Any) -> str:
    return str(raw).strip().replace("\\", "/").strip("/")


def config_from_mapping(payload: Mapping[str, Any]) -> ExtractionConfig:
    """Build an ``ExtractionConfig`` from a parsed config payload.

    Raises:
        ValueError: If a field has the wrong shape.
    """
    kwargs: Dict[str, Any] = {}

    if "excluded_segments" in payload:
        raw_segments = payload["excluded_segments"]
        if not isinstance(raw_segments, list):
            raise ValueError("excluded_segments must be a list")
        segments = tuple(s for s in (_normalize_segment(r) for r in raw_segments) if s)
        kwargs["excluded_segments"] = segments

    if "extensions" in payload:
        raw_extensions = payload["extensions"]
        if not isinstance(raw_extensions, dict):
            raise ValueError("extensions must be a mapping of extension to kind")
        extensions: Dict[str, SourceKind] = {}
        for ext, kind in raw_extensions.items():
            ext = str(ext).strip()
            if not ext.startswith("."):
                ext = "." + ext
            try:
                extensions[ext] = SourceKind(str(kind).strip().lower())
            except ValueError as exc:
                raise ValueError(
                    f"extension '{ext}' has unknown kind '{kind}'"
                ) from exc
        kwargs["extensions"] = extensions

    if "include_constructors" in payload:
        kwargs["include_constructors"] = bool(payload["include_constructors"])

    return ExtractionConfig(**kwargs)


def load_extraction_config(
    config_path: Optional[str] = None,
    strict: bool = False,
) -> ExtractionConfig:
    """Load extraction settings from an optional YAML/JSON file.

    Without a path the defaults are returned. In non-strict mode an unreadable
    or invalid file falls back to defaults with a warning; in strict mode it
    raises ``ConfigValidationError``.
    """
    if config_path is None:
        return ExtractionConfig()

    payload = load_config_file(config_path, strict=strict)
    try:
        config = config_from_mapping(payload)
    except ValueError as exc:
        msg = f"Invalid extraction config {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return ExtractionConfig()

    logger.info(
        "Loaded extraction config from %s (%d excluded segments, %d extensions)",
        config_path,
        len(config.excluded_segments),
        len(config.extensions),
    )
    return config

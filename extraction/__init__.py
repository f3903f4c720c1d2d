"""
Code element extraction engine.

Walks a source tree and extracts methods from Java files (tree-sitter) and
top-level message/enum blocks from .proto files (line scanner), with their
documentation, line ranges, enclosing context and verbatim snippets.
"""

from extraction.config import ExtractionConfig, SourceKind, load_extraction_config
from extraction.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from extraction.models import Element, ElementContext, ElementKind, FileExtractionResult
from extraction.parser import (
    JavaSyntaxError,
    SyntaxProblem,
    collect_syntax_problems,
    create_parser,
    parse_bytes,
    parse_file,
    parse_java_source,
)
from extraction.traversal import extract_elements_from_tree
from extraction.schema_scanner import (
    ScannerState,
    ScanStep,
    count_delimiters,
    finish_scan,
    initial_state,
    scan_line,
    scan_schema_source,
)
from extraction.extractor import (
    ExtractionStats,
    discover_source_files,
    extract_directory,
    extract_file,
    extract_to_dict_list,
    is_included_path,
)

__all__ = [
    # Configuration
    "ExtractionConfig",
    "SourceKind",
    "load_extraction_config",
    # Data models
    "Element",
    "ElementContext",
    "ElementKind",
    "FileExtractionResult",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "ExtractionStats",
    # Java parsing
    "JavaSyntaxError",
    "SyntaxProblem",
    "collect_syntax_problems",
    "create_parser",
    "parse_bytes",
    "parse_file",
    "parse_java_source",
    "extract_elements_from_tree",
    # Schema scanning
    "ScannerState",
    "ScanStep",
    "count_delimiters",
    "finish_scan",
    "initial_state",
    "scan_line",
    "scan_schema_source",
    # High-level orchestration
    "discover_source_files",
    "extract_directory",
    "extract_file",
    "extract_to_dict_list",
    "is_included_path",
]

"""
High-level orchestrator for code element extraction.

This module provides the main entry points for extracting elements from
single files or entire directory trees: file discovery with path-segment
exclusion, dispatch to the Java or schema extractor, and per-file failure
isolation.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from extraction.config import ExtractionConfig, SourceKind
from extraction.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from extraction.models import Element, FileExtractionResult
from extraction.parser import JavaSyntaxError, parse_java_source
from extraction.schema_scanner import scan_schema_source
from extraction.traversal import extract_elements_from_tree

logger = logging.getLogger(__name__)


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.elements_extracted = 0
        self.diagnostics = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "elements_extracted": self.elements_extracted,
            "diagnostics": self.diagnostics,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, elements={self.elements_extracted}, "
            f"diagnostics={self.diagnostics})"
        )


def relative_posix_path(path: str, root: str) -> str:
    """Path of ``path`` relative to ``root`` with ``/`` separators."""
    return os.path.relpath(path, root).replace(os.sep, "/")


def is_excluded_path(relative_path: str, excluded_segments: Tuple[str, ...]) -> bool:
    """Check whether a root-relative path contains an excluded segment.

    The path is wrapped as ``/<relative_path>`` and a segment matches when
    ``/<segment>/`` occurs anywhere in it, so ``build`` excludes
    ``build/a.java`` and ``x/build/a.java`` but not ``rebuild/a.java``.

    Args:
        relative_path: ``/``-separated path relative to the root.
        excluded_segments: Configured excluded segments.

    Returns:
        True if the path must be skipped.
    """
    wrapped = "/" + relative_path.replace("\\", "/").lstrip("/")
    return any(f"/{segment}/" in wrapped for segment in excluded_segments)


def is_included_path(path: str, root: str, config: ExtractionConfig) -> bool:
    """Check whether a file takes part in extraction.

    A file is included when its root-relative path has no excluded segment
    and its extension maps to an extractor.
    """
    relative_path = relative_posix_path(path, root)
    if is_excluded_path(relative_path, config.excluded_segments):
        return False
    return config.source_kind_for(os.path.basename(path)) is not None


def discover_source_files(
    directory: str,
    config: Optional[ExtractionConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> List[str]:
    """Recursively discover all recognized source files in a directory.

    Directory entries are visited in sorted order and excluded directories
    are pruned without being listed.

    Args:
        directory: Root directory to search.
        config: Extraction settings; defaults are used if None.
        sink: Receives diagnostics for subdirectories that cannot be listed.

    Returns:
        List of absolute paths to recognized source files.

    Raises:
        FileNotFoundError: If the root does not exist.
        NotADirectoryError: If the root is not a directory.
        OSError: If the root itself cannot be listed.
    """
    config = config or ExtractionConfig()
    directory = os.path.abspath(directory)

    if not os.path.exists(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not os.path.isdir(directory):
        raise NotADirectoryError(f"Not a directory: {directory}")

    def _on_walk_error(err: OSError) -> None:
        failed_path = os.path.abspath(err.filename) if err.filename else directory
        if failed_path == directory:
            raise err
        logger.error(f"Cannot list directory {failed_path}: {err}")
        if sink is not None:
            sink.record(
                Diagnostic(
                    file_path=relative_posix_path(failed_path, directory),
                    message=f"Failed to list directory: {err.strerror or err}",
                    kind=DiagnosticKind.TRAVERSAL_ERROR,
                )
            )

    source_files = []
    logger.info(f"Discovering source files in {directory}")

    for root, dirs, files in os.walk(directory, onerror=_on_walk_error):
        # Prune excluded directories so their contents are never opened
        dirs[:] = sorted(
            d for d in dirs
            if not is_excluded_path(
                relative_posix_path(os.path.join(root, d), directory) + "/",
                config.excluded_segments,
            )
        )

        for file in sorted(files):
            path = os.path.join(root, file)
            if not os.path.isfile(path):
                continue
            if is_included_path(path, directory, config):
                source_files.append(path)

    logger.info(f"Found {len(source_files)} source files")
    return source_files


def _read_error(relative_path: str, message: str) -> FileExtractionResult:
    return FileExtractionResult(
        diagnostics=[Diagnostic(relative_path, message, DiagnosticKind.READ_ERROR)],
        file_failed=True,
    )


def extract_java_file(
    file_path: str,
    relative_path: str,
    config: Optional[ExtractionConfig] = None,
) -> FileExtractionResult:
    """Extract method elements from one Java file.

    Syntax errors, recursion overflows and unexpected failures are turned
    into diagnostics and the file yields no elements.

    Args:
        file_path: Path to the .java file.
        relative_path: Path relative to the traversal root, ``/``-separated.
        config: Extraction settings; defaults are used if None.

    Returns:
        The file's elements and diagnostics.
    """
    config = config or ExtractionConfig()
    file_name = os.path.basename(file_path)

    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
        source_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        return _read_error(relative_path, f"Failed to decode Java file as UTF-8: {e.reason}")
    except OSError as e:
        return _read_error(relative_path, f"Failed to read Java file: {e}")

    try:
        tree = parse_java_source(source_bytes)
        elements = extract_elements_from_tree(
            tree=tree,
            source_bytes=source_bytes,
            file_path=relative_path,
            file_name=file_name,
            include_constructors=config.include_constructors,
        )
    except JavaSyntaxError as e:
        diagnostics = [
            Diagnostic(relative_path, "Failed to parse Java file", DiagnosticKind.SYNTAX_ERROR)
        ]
        diagnostics.extend(
            Diagnostic(
                file_path=relative_path,
                message=problem.message,
                kind=DiagnosticKind.SYNTAX_ERROR,
                line=problem.line,
            )
            for problem in e.problems
        )
        return FileExtractionResult(diagnostics=diagnostics, file_failed=True)
    except RecursionError:
        return FileExtractionResult(
            diagnostics=[
                Diagnostic(
                    relative_path,
                    "Recursion limit exceeded during Java extraction "
                    "(file is nested too deeply). Skipping file",
                    DiagnosticKind.RUNTIME_ERROR,
                )
            ],
            file_failed=True,
        )
    except Exception as e:
        logger.error(f"Unexpected error processing {relative_path}: {e}", exc_info=True)
        return FileExtractionResult(
            diagnostics=[
                Diagnostic(
                    relative_path,
                    f"Failed to process Java file: {type(e).__name__}: {e}",
                    DiagnosticKind.RUNTIME_ERROR,
                )
            ],
            file_failed=True,
        )

    return FileExtractionResult(elements=elements)


def extract_schema_file(file_path: str, relative_path: str) -> FileExtractionResult:
    """Extract top-level message/enum blocks from one .proto file.

    Args:
        file_path: Path to the .proto file.
        relative_path: Path relative to the traversal root, ``/``-separated.

    Returns:
        The file's elements and diagnostics. Malformed blocks are reported
        and skipped; the rest of the file is still scanned.
    """
    try:
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        return _read_error(relative_path, f"Failed to decode proto file as UTF-8: {e.reason}")
    except OSError as e:
        return _read_error(relative_path, f"Failed to read proto file: {e}")

    try:
        return scan_schema_source(text, relative_path, os.path.basename(file_path))
    except Exception as e:
        logger.error(f"Unexpected error processing {relative_path}: {e}", exc_info=True)
        return FileExtractionResult(
            diagnostics=[
                Diagnostic(
                    relative_path,
                    f"Failed to process proto file: {type(e).__name__}: {e}",
                    DiagnosticKind.RUNTIME_ERROR,
                )
            ],
            file_failed=True,
        )


def extract_file(
    file_path: str,
    root: Optional[str] = None,
    config: Optional[ExtractionConfig] = None,
) -> FileExtractionResult:
    """Extract all elements from a single source file.

    Args:
        file_path: Absolute or relative path to a .java or .proto file.
        root: Traversal root for relative paths. If None, uses the file's
            parent directory.
        config: Extraction settings; defaults are used if None.

    Returns:
        The file's elements and diagnostics.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file's extension is not recognized.

    Example:
        >>> result = extract_file("src/Calc.java", "/path/to/repo")
        >>> for element in result.elements:
        ...     print(element.signature)
    """
    config = config or ExtractionConfig()
    file_path = os.path.abspath(file_path)

    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    kind = config.source_kind_for(os.path.basename(file_path))
    if kind is None:
        raise ValueError(
            f"File {file_path} is not a recognized source file. "
            f"Expected one of: {sorted(config.extensions)}"
        )

    resolved_root = os.path.dirname(file_path) if root is None else os.path.abspath(root)
    relative_path = relative_posix_path(file_path, resolved_root)

    logger.info("Extracting elements from %s", relative_path)

    if kind is SourceKind.JAVA:
        result = extract_java_file(file_path, relative_path, config)
    else:
        result = extract_schema_file(file_path, relative_path)

    logger.info("Extracted %d elements from %s", len(result.elements), relative_path)
    return result


def extract_directory(
    directory: str,
    config: Optional[ExtractionConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> Tuple[List[Element], ExtractionStats]:
    """Extract elements from all recognized files in a directory tree.

    Files are processed one at a time in discovery order. A failing file
    contributes its diagnostics to ``sink`` and never stops the walk.

    Args:
        directory: Root directory to process.
        config: Extraction settings; defaults are used if None.
        sink: Collects diagnostics for the run. A private sink is used if None.

    Returns:
        A tuple of (elements, stats) where:
        - elements: All extracted elements in traversal order
        - stats: ExtractionStats object with processing statistics

    Raises:
        FileNotFoundError: If directory does not exist.
        NotADirectoryError: If directory is not a directory.
        OSError: If the root directory cannot be listed.

    Example:
        >>> sink = DiagnosticSink()
        >>> elements, stats = extract_directory("/path/to/repo", sink=sink)
        >>> print(f"Extracted {stats.elements_extracted} elements, {len(sink)} problems")
    """
    config = config or ExtractionConfig()
    sink = sink if sink is not None else DiagnosticSink()
    directory = os.path.abspath(directory)

    stats = ExtractionStats()
    all_elements: List[Element] = []
    diagnostics_before = len(sink)

    source_files = discover_source_files(directory, config, sink)

    if not source_files:
        logger.warning(f"No source files found in {directory}")

    for file_path in source_files:
        try:
            result = extract_file(file_path, directory, config)
        except FileNotFoundError:
            # Removed between discovery and extraction
            result = _read_error(
                relative_posix_path(file_path, directory),
                "File disappeared before it could be read",
            )
        sink.extend(result.diagnostics)
        all_elements.extend(result.elements)
        stats.elements_extracted += len(result.elements)
        if result.file_failed:
            stats.files_failed += 1
        else:
            stats.files_processed += 1

    stats.diagnostics = len(sink) - diagnostics_before
    logger.info(f"Extraction complete: {stats}")
    return all_elements, stats


def extract_to_dict_list(
    source: str,
    config: Optional[ExtractionConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> List[Dict[str, Any]]:
    """Extract elements and return them as a list of dictionaries.

    This is a convenience function that automatically detects whether
    the source is a file or directory and returns results in dict format
    ready for JSON serialization.

    Args:
        source: Path to a file or directory.
        config: Extraction settings; defaults are used if None.
        sink: Collects diagnostics; a private sink is used if None.

    Returns:
        List of element dictionaries with absent fields omitted.
    """
    source = os.path.abspath(source)
    sink = sink if sink is not None else DiagnosticSink()

    if os.path.isfile(source):
        result = extract_file(source, config=config)
        sink.extend(result.diagnostics)
        elements = result.elements
    elif os.path.isdir(source):
        elements, stats = extract_directory(source, config, sink)
        logger.info(f"Extraction stats: {stats}")
    else:
        raise FileNotFoundError(f"Source not found: {source}")

    return [element.to_dict() for element in elements]

"""
Tree-sitter parser initialization and Java file parsing utilities.

This module provides functions to initialize the Java parser, parse source
files, and report syntax problems found in the resulting tree.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser, Tree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
JAVA_LANGUAGE = Language(tsjava.language())

# Longest source excerpt quoted in a syntax problem message
_EXCERPT_LIMIT = 40


@dataclass(frozen=True)
class SyntaxProblem:
    """One syntax problem reported by the parser.

    Attributes:
        line: 1-indexed line of the problem, or None when unknown
        message: Human-readable description
    """

    line: Optional[int]
    message: str


class JavaSyntaxError(Exception):
    """Raised when a Java source does not parse cleanly."""

    def __init__(self, problems: List[SyntaxProblem]):
        self.problems = problems
        super().__init__(f"{len(problems)} syntax problem(s)")


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for Java.

    Returns:
        A Parser instance configured with the Java language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"class A { void f() {} }")
    """
    parser = Parser(JAVA_LANGUAGE)
    logger.debug("Created tree-sitter Java parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of Java source code.

    Args:
        source: UTF-8 encoded bytes of Java source code.

    Returns:
        A Tree object representing the parsed AST. The tree may contain
        ERROR/MISSING nodes; see ``collect_syntax_problems``.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"class A {}")
        >>> tree.root_node.type
        'program'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    logger.debug(f"Parsed {len(source)} bytes of Java code")
    return tree


def _describe_error_node(node: Node) -> str:
    if node.is_missing:
        return f"Missing '{node.type}'"
    text = (node.text or b"").decode("utf-8", errors="replace")
    text = " ".join(text.split())
    if not text:
        return "Unexpected end of input"
    if len(text) > _EXCERPT_LIMIT:
        text = text[:_EXCERPT_LIMIT] + "..."
    return f"Syntax error near '{text}'"


def collect_syntax_problems(tree: Tree) -> List[SyntaxProblem]:
    """Collect one problem per ERROR or MISSING node, in source order.

    Only subtrees flagged ``has_error`` are descended into.

    Args:
        tree: A parsed tree.

    Returns:
        List of syntax problems; empty when the tree is clean.
    """
    problems: List[SyntaxProblem] = []
    if not tree.root_node.has_error:
        return problems

    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            problems.append(
                SyntaxProblem(
                    line=node.start_point[0] + 1,
                    message=_describe_error_node(node),
                )
            )
            # Nested errors inside an ERROR node repeat the same problem
            continue
        stack.extend(
            child for child in reversed(node.children)
            if child.has_error or child.is_missing
        )

    if not problems:
        # has_error without a locatable node
        problems.append(SyntaxProblem(line=None, message="Unlocated syntax error"))
    return problems


def parse_java_source(source: bytes) -> Tree:
    """Parse Java source and reject trees with syntax problems.

    Raises:
        JavaSyntaxError: If the tree contains ERROR or MISSING nodes.
    """
    tree = parse_bytes(source)
    problems = collect_syntax_problems(tree)
    if problems:
        raise JavaSyntaxError(problems)
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a Java source file from disk.

    Args:
        file_path: Path to the .java file.

    Returns:
        A tuple of (Tree, source_bytes) where:
        - Tree is the parsed AST
        - source_bytes is the raw file content as bytes

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
        JavaSyntaxError: If the file contains syntax errors.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree = parse_java_source(source_bytes)

    logger.debug(f"Successfully parsed file: {file_path}")
    return tree, source_bytes

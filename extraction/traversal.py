"""
AST traversal and method extraction logic.

This module walks the Java AST depth-first and extracts one element per
method declaration, along with its attached Javadoc, enclosing type and
verbatim source snippet.
"""

import logging
import posixpath
import re
from typing import List, Optional

from tree_sitter import Node, Tree

from extraction.config import (
    COMMENT_NODES,
    DECLARATION_KIND_MAP,
    DEFAULT_INCLUDE_CONSTRUCTORS,
    FORMAL_PARAMETER_NODE,
    JAVADOC_PREFIX,
    MAX_JAVADOC_GAP_LINES,
    PACKAGE_NODE,
    SPREAD_PARAMETER_NODE,
    TYPE_DECLARATION_TYPES,
    DeclarationKind,
)
from extraction.models import Element, ElementContext, ElementKind
from extraction.source_text import snippet_for_lines, split_source_lines

logger = logging.getLogger(__name__)
_SPACE_RE = re.compile(r"\s+")
_JAVADOC_LINE_MARKER_RE = re.compile(r"(?m)^\s*\* ?")

# Children of spread_parameter that are not part of the parameter type
_SPREAD_NON_TYPE_NODES = {
    "modifiers",
    "variable_declarator",
    "annotation",
    "marker_annotation",
} | COMMENT_NODES


def _node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def is_javadoc_comment(comment_text: str) -> bool:
    """Check if a comment is a Javadoc comment.

    Args:
        comment_text: The text content of the comment.

    Returns:
        True if the comment starts with ``/**`` (and is not the empty ``/**/``).
    """
    stripped = comment_text.strip()
    return stripped.startswith(JAVADOC_PREFIX) and stripped != "/**/"


def clean_javadoc_comment(comment_text: str) -> Optional[str]:
    """Strip Javadoc delimiters and leading ``*`` markers.

    Removes:
    - the ``/**`` opener and ``*/`` closer
    - a leading ``*`` (plus one following space) on each line

    Internal line breaks are kept; surrounding whitespace is trimmed.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text, or None if nothing remains.
    """
    body = comment_text.strip()
    if body.startswith(JAVADOC_PREFIX):
        body = body[len(JAVADOC_PREFIX):]
    if body.endswith("*/"):
        body = body[:-2]
    body = _JAVADOC_LINE_MARKER_RE.sub("", body)
    cleaned = "\n".join(line.rstrip() for line in body.split("\n")).strip()
    return cleaned or None


def get_attached_javadoc(node: Node) -> Optional[Node]:
    """Return the Javadoc comment node directly preceding a declaration.

    The comment must be the previous named sibling and end at most
    ``MAX_JAVADOC_GAP_LINES`` rows above the declaration's first row.

    Args:
        node: A method or constructor declaration node.

    Returns:
        The comment node, or None if no Javadoc is attached.
    """
    sibling = node.prev_named_sibling
    if sibling is None or sibling.type not in COMMENT_NODES:
        return None

    gap = node.start_point[0] - sibling.end_point[0]
    if gap > MAX_JAVADOC_GAP_LINES:
        return None

    if not is_javadoc_comment(_node_text(sibling)):
        return None
    return sibling


def _parameter_type(param: Node) -> Optional[str]:
    """Type text of one formal/spread parameter, or None for other nodes."""
    if param.type == FORMAL_PARAMETER_NODE:
        type_node = param.child_by_field_name("type")
        if type_node is None:
            return None
        text = _node_text(type_node)
        dimensions = param.child_by_field_name("dimensions")
        if dimensions is not None:
            text += _node_text(dimensions)
        return text

    if param.type == SPREAD_PARAMETER_NODE:
        for child in param.named_children:
            if child.type not in _SPREAD_NON_TYPE_NODES:
                return _node_text(child) + "..."
        return None

    # receiver_parameter and comments are not part of the signature
    return None


def build_method_signature(node: Node) -> Optional[str]:
    """Build the ``name(Type, ...)`` signature of a method or constructor.

    Modifiers, annotations, parameter names, the return type and the throws
    clause are left out.

    Args:
        node: A method_declaration or constructor_declaration node.

    Returns:
        The signature, or None if the node has no name.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None

    param_types: List[str] = []
    params = node.child_by_field_name("parameters")
    if params is not None:
        for param in params.named_children:
            type_text = _parameter_type(param)
            if type_text:
                param_types.append(_SPACE_RE.sub(" ", type_text).strip())

    return f"{_node_text(name_node)}({', '.join(param_types)})"


def find_enclosing_type_name(node: Node) -> Optional[str]:
    """Name of the nearest ancestor class/interface/enum/record declaration.

    Anonymous class bodies are skipped, so a method inside one resolves to
    the named type that contains it.
    """
    parent = node.parent
    while parent is not None:
        if parent.type in TYPE_DECLARATION_TYPES:
            name_node = parent.child_by_field_name("name")
            if name_node is not None:
                return _node_text(name_node)
        parent = parent.parent
    return None


def extract_package_name(root: Node) -> Optional[str]:
    """Return the file's package name, or None if it has no package declaration."""
    for child in root.named_children:
        if child.type != PACKAGE_NODE:
            continue
        for part in child.named_children:
            if part.type in ("scoped_identifier", "identifier"):
                return _node_text(part)
    return None


def extract_method_element(
    node: Node,
    lines: List[str],
    file_path: str,
    file_name: str,
    module: Optional[str],
) -> Optional[Element]:
    """Extract a single Method element from a declaration node.

    Args:
        node: A method_declaration or constructor_declaration node.
        lines: Source lines of the file (no line terminators).
        file_path: File path relative to the traversal root.
        file_name: Base name of the file.
        module: Package name of the file, if any.

    Returns:
        An Element, or None if the node has no name.
    """
    signature = build_method_signature(node)
    if signature is None:
        logger.debug(f"Skipping unnamed {node.type} at line {node.start_point[0] + 1}")
        return None

    name = _node_text(node.child_by_field_name("name"))
    declaration_line = node.start_point[0] + 1
    end_line = node.end_point[0] + 1

    javadoc = get_attached_javadoc(node)
    if javadoc is not None:
        documentation = clean_javadoc_comment(_node_text(javadoc))
        start_line = javadoc.start_point[0] + 1
    else:
        documentation = None
        start_line = declaration_line

    element = Element(
        name=name,
        kind=ElementKind.METHOD,
        signature=signature,
        documentation=documentation,
        declaration_line=declaration_line,
        start_line=start_line,
        end_line=end_line,
        context=ElementContext(
            module=module,
            file_path=file_path,
            file_name=file_name,
            enclosing_type_name=find_enclosing_type_name(node),
            snippet=snippet_for_lines(lines, start_line, end_line),
        ),
    )

    logger.debug(f"Extracted Method: {signature} at {file_path}:{declaration_line}")
    return element


def traverse_and_extract(
    node: Node,
    lines: List[str],
    file_path: str,
    file_name: str,
    module: Optional[str],
    include_constructors: bool = DEFAULT_INCLUDE_CONSTRUCTORS,
) -> List[Element]:
    """Recursively traverse the AST and extract all method elements.

    Every child is classified by its declaration kind tag; methods (and
    constructors, when enabled) are emitted before their bodies are
    searched for nested types, so elements come out in pre-order.

    Args:
        node: The current AST node to traverse.
        lines: Source lines of the file.
        file_path: File path relative to the traversal root.
        file_name: Base name of the file.
        module: Package name of the file, if any.
        include_constructors: Whether constructors are emitted.

    Returns:
        List of all method elements found below ``node``.
    """
    elements: List[Element] = []

    for child in node.named_children:
        kind = DECLARATION_KIND_MAP.get(child.type)

        if kind is DeclarationKind.METHOD or (
            kind is DeclarationKind.CONSTRUCTOR and include_constructors
        ):
            element = extract_method_element(child, lines, file_path, file_name, module)
            if element is not None:
                elements.append(element)

        # Types, method bodies and everything else may hold further declarations
        elements.extend(
            traverse_and_extract(
                child,
                lines,
                file_path,
                file_name,
                module,
                include_constructors=include_constructors,
            )
        )

    return elements


def extract_elements_from_tree(
    tree: Tree,
    source_bytes: bytes,
    file_path: str,
    file_name: Optional[str] = None,
    include_constructors: bool = DEFAULT_INCLUDE_CONSTRUCTORS,
) -> List[Element]:
    """Extract all method elements from a parsed Java AST.

    This is the main entry point for Java extraction.

    Args:
        tree: The parsed AST tree.
        source_bytes: The raw source file bytes.
        file_path: File path relative to the traversal root.
        file_name: Base name of the file; derived from ``file_path`` if omitted.
        include_constructors: Whether constructors are emitted.

    Returns:
        List of all extracted method elements.

    Raises:
        UnicodeDecodeError: If the source is not valid UTF-8.
        RecursionError: If the tree is nested too deeply to traverse.
    """
    if file_name is None:
        file_name = posixpath.basename(file_path)

    lines = split_source_lines(source_bytes.decode("utf-8"))
    module = extract_package_name(tree.root_node)

    elements = traverse_and_extract(
        tree.root_node,
        lines,
        file_path,
        file_name,
        module,
        include_constructors=include_constructors,
    )
    logger.debug(f"Extracted {len(elements)} methods from {file_path}")
    return elements

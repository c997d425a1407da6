"""Tree search and source editing primitives.

tree-sitter trees are read-only, so every transformation is expressed as
a list of byte-range edits against the bytes a tree was parsed from and
materialized by splicing.  Serializing a subtree is slicing its range.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import tree_sitter

Node = tree_sitter.Node

# Node types whose text must never be re-indented
_VERBATIM_TYPES = frozenset({"template_string", "string", "comment"})

@dataclass(frozen=True)
class SourceEdit:
    """Replace ``source[start:end]`` with ``text``."""

    start: int
    end: int
    text: str

    def overlaps(self, other: "SourceEdit") -> bool:
        return self.start < other.end and other.start < self.end


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def named_children(node: Node) -> List[Node]:
    """Named children of ``node`` without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of ``node`` and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_all(node: Node, predicate: Callable[[Node], bool]) -> List[Node]:
    """All nodes within ``node`` (inclusive) matching ``predicate``, in source order."""
    return [n for n in walk(node) if predicate(n)]


def has_child_token(node: Node, token: str) -> bool:
    """True if ``node`` has an anonymous child token such as ``async`` or ``*``."""
    return any(not child.is_named and child.type == token for child in node.children)


def unwrap_parenthesized(node: Node) -> Node:
    while node.type == "parenthesized_expression":
        inner = named_children(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def string_value(node: Node, source: bytes) -> Optional[str]:
    """Raw content of a string literal, or of a template literal without substitutions."""
    if node.type == "string":
        return node_text(node, source)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return node_text(node, source)[1:-1]
    return None


def property_name(node: Optional[Node], source: bytes) -> Optional[str]:
    """Static name of an object key node (identifier, string or number)."""
    if node is None:
        return None
    if node.type in ("property_identifier", "identifier", "shorthand_property_identifier",
                     "shorthand_property_identifier_pattern", "number"):
        return node_text(node, source)
    if node.type == "string":
        return string_value(node, source)
    return None


def splice(source: bytes, start: int, end: int, edits: Sequence[SourceEdit]) -> str:
    """Apply ``edits`` to ``source[start:end]`` and return the resulting text.

    Raises:
        ValueError: If edits overlap or fall outside the range
    """
    pieces: List[bytes] = []
    cursor = start
    for edit in sorted(edits, key=lambda e: (e.start, e.end)):
        if edit.start < cursor or edit.end > end:
            raise ValueError(f"Edit {edit.start}:{edit.end} overlaps or exceeds range {start}:{end}")
        pieces.append(source[cursor:edit.start])
        pieces.append(edit.text.encode("utf-8"))
        cursor = edit.end
    pieces.append(source[cursor:end])
    return b"".join(pieces).decode("utf-8", errors="replace")


def dedent_edits(node: Node, source: bytes, columns: int) -> List[SourceEdit]:
    """Edits removing up to ``columns`` leading blanks from each continuation line of ``node``.

    Lines that start inside a string or template literal are left alone,
    since their leading whitespace is part of the value.
    """
    if columns <= 0:
        return []
    verbatim: List[Tuple[int, int]] = [
        (n.start_byte, n.end_byte) for n in walk(node) if n.type in _VERBATIM_TYPES
    ]
    edits: List[SourceEdit] = []
    start, end = node.start_byte, node.end_byte
    newline = source.find(b"\n", start, end)
    while newline != -1:
        line_start = newline + 1
        cursor = line_start
        while cursor < end and cursor - line_start < columns and source[cursor] in (0x20, 0x09):
            cursor += 1
        if cursor > line_start and not any(lo < line_start < hi for lo, hi in verbatim):
            edits.append(SourceEdit(line_start, cursor, ""))
        newline = source.find(b"\n", line_start, end)
    return edits


def render(node: Node, source: bytes, edits: Sequence[SourceEdit] = (), dedent: int = 0) -> str:
    """Serialize ``node`` with ``edits`` applied, dedented by ``dedent`` columns."""
    combined = list(edits)
    for edit in dedent_edits(node, source, dedent):
        if not any(edit.overlaps(existing) for existing in edits):
            combined.append(edit)
    return splice(source, node.start_byte, node.end_byte, combined)


def line_indent(node: Node, source: bytes) -> int:
    """Number of blank characters opening the line ``node`` starts on."""
    line_start = source.rfind(b"\n", 0, node.start_byte) + 1
    cursor = line_start
    while cursor < node.start_byte and source[cursor] in (0x20, 0x09):
        cursor += 1
    return cursor - line_start


def indent(text: str, prefix: str) -> str:
    """Prefix every non-empty line after the first with ``prefix``."""
    lines = text.split("\n")
    return "\n".join([lines[0]] + [prefix + line if line.strip() else line for line in lines[1:]])

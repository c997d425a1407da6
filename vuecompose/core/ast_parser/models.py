"""AST Parser data models.

Defines the core data structures for parsed source representation.
These are pure data containers with no parsing logic.
"""

from dataclasses import dataclass, field
from typing import List

import tree_sitter


@dataclass
class ParseError:
    """An error encountered during parsing."""

    file_path: str
    line: int
    message: str
    severity: str = "warning"  # "warning" | "error"


@dataclass
class ParseResult:
    """Complete parse output for a single source text.

    Holds the tree-sitter tree together with the exact bytes it was
    parsed from; every node offset refers into ``source``.
    """

    file_path: str
    language: str
    tree: tree_sitter.Tree
    source: bytes
    line_count: int = 0
    errors: List[ParseError] = field(default_factory=list)

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

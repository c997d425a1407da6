"""TypeScript parser using tree-sitter.

Same node vocabulary as JavaScript for everything the migration touches,
plus type annotations; parameters are wrapped in ``required_parameter`` /
``optional_parameter`` nodes.
"""

import tree_sitter
import tree_sitter_typescript

from .base import BaseLanguageParser

_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())


class TypeScriptParser(BaseLanguageParser):
    """tree-sitter based TypeScript parser."""

    def get_language(self) -> str:
        return "typescript"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _TS_LANGUAGE

    def supports_type_syntax(self) -> bool:
        return True

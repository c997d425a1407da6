"""JavaScript parser using tree-sitter."""

import tree_sitter
import tree_sitter_javascript

from .base import BaseLanguageParser

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())


class JavaScriptParser(BaseLanguageParser):
    """tree-sitter based JavaScript parser.

    Plain JavaScript cannot carry type-only imports or generic call
    arguments, so injections emitted into these sources stay untyped.
    """

    def get_language(self) -> str:
        return "javascript"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _JS_LANGUAGE

"""VueCompose AST Parser — tree-sitter based parsing and source editing.

Public API:
    parse_file(path) → ParseResult
    parse_source(source, file_path, language) → ParseResult
    detect_language(file_path) → str | None
"""

from .models import ParseError, ParseResult
from .sfc import ScriptBlock, find_script_block
from .toolkit import SourceEdit, find_all, node_text, render, splice
from .utils import detect_language, get_parser, is_supported_file, should_skip_directory

__all__ = [
    "parse_file",
    "parse_source",
    "detect_language",
    "get_parser",
    "is_supported_file",
    "should_skip_directory",
    "find_script_block",
    "find_all",
    "node_text",
    "render",
    "splice",
    "ParseError",
    "ParseResult",
    "ScriptBlock",
    "SourceEdit",
]


def parse_file(file_path: str) -> ParseResult:
    """Parse a JavaScript or TypeScript source file.

    Args:
        file_path: Path to the source file

    Returns:
        ParseResult for the file

    Raises:
        ValueError: If the extension is not a plain script language
    """
    language = detect_language(file_path)
    if language not in ("javascript", "typescript"):
        raise ValueError(f"Cannot parse {file_path} directly (language: {language})")
    return get_parser(language).parse_file(file_path)


def parse_source(source_text: str, file_path: str = "<memory>", language: str | None = None) -> ParseResult:
    """Parse source code string.

    Args:
        source_text: Source code as string
        file_path: File path (for diagnostics)
        language: Language identifier. If None, detected from file_path,
            defaulting to javascript.

    Returns:
        ParseResult with the tree and any parse errors
    """
    if language is None:
        language = detect_language(file_path)
    if language not in ("javascript", "typescript"):
        language = "javascript"
    return get_parser(language).parse_source(source_text, file_path)

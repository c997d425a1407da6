"""AST Parser utilities.

Language detection, parser registry, and helper functions.
"""

import os
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseLanguageParser

# Extension → language mapping.  "vue" is a container format: its script
# block is parsed as javascript or typescript depending on its lang attribute.
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".vue": "vue",
}

# Script lang attribute → language mapping for single-file components
SCRIPT_LANGUAGES: Dict[str, str] = {
    "js": "javascript",
    "javascript": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
    ".nuxt",
    ".output",
    ".cache",
    "__pycache__",
})

# Parser registry, loaded on first use
_parser_registry: Dict[str, "BaseLanguageParser"] = {}


def detect_language(file_path: str) -> Optional[str]:
    """Detect source language from file extension.

    Args:
        file_path: Path to the source file

    Returns:
        Language identifier string or None if unsupported
    """
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_EXTENSIONS.get(ext.lower())


def get_parser(language: str) -> "BaseLanguageParser":
    """Get a parser instance for the given language.

    Parser instances are stateless (a fresh tree-sitter parser is created
    per parse), so a single registry entry can be shared across threads.

    Args:
        language: Language identifier (e.g., "typescript")

    Returns:
        Parser instance

    Raises:
        ValueError: If language is not supported
    """
    if language not in _parser_registry:
        if language == "javascript":
            from .javascript_parser import JavaScriptParser
            _parser_registry["javascript"] = JavaScriptParser()
        elif language == "typescript":
            from .typescript_parser import TypeScriptParser
            _parser_registry["typescript"] = TypeScriptParser()
        else:
            raise ValueError(
                f"Unsupported language: {language}. "
                f"Supported: ['javascript', 'typescript']"
            )

    return _parser_registry[language]


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking.

    Args:
        dir_name: Directory name (not full path)

    Returns:
        True if directory should be skipped
    """
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")


def is_supported_file(file_path: str) -> bool:
    """Check if a file has a supported extension.

    Args:
        file_path: Path to the file

    Returns:
        True if the file can be migrated
    """
    return detect_language(file_path) is not None

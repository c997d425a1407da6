"""Vue single-file component script extraction — regex-based.

Locates the options-API ``<script>`` block of a ``.vue`` file so the
migration engine can work on plain JavaScript/TypeScript, then splices
the migrated script back as ``<script setup>``.

Does NOT parse the template or style blocks; they are carried through
byte-for-byte.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .utils import SCRIPT_LANGUAGES

logger = logging.getLogger(__name__)

# <script ...> ... </script>, attributes captured separately
_SCRIPT_BLOCK_RE = re.compile(
    r"<script(?P<attrs>(?:\s[^>]*)?)>(?P<content>.*?)</script\s*>",
    re.IGNORECASE | re.DOTALL,
)
_SETUP_ATTR_RE = re.compile(r"(?:^|\s)setup(?:\s|=|$)", re.IGNORECASE)
_LANG_ATTR_RE = re.compile(r"""\slang\s*=\s*["']?([\w-]+)""", re.IGNORECASE)


@dataclass
class ScriptBlock:
    """Location of a script block inside a single-file component."""

    attrs: str
    content: str
    language: str
    tag_start: int  # offset of "<script"
    content_start: int
    content_end: int

    def rebuild(self, sfc_source: str, new_content: str) -> str:
        """Return ``sfc_source`` with this block replaced by a ``<script setup>`` block."""
        attrs = self.attrs if _SETUP_ATTR_RE.search(self.attrs) else f" setup{self.attrs}"
        return (
            sfc_source[:self.tag_start]
            + f"<script{attrs}>"
            + new_content
            + sfc_source[self.content_end:]
        )


def find_script_block(sfc_source: str) -> Optional[ScriptBlock]:
    """Find the first ``<script>`` block that is not already ``setup``.

    Args:
        sfc_source: Full text of a ``.vue`` file

    Returns:
        ScriptBlock or None if the file has no eligible script
    """
    for match in _SCRIPT_BLOCK_RE.finditer(sfc_source):
        attrs = match.group("attrs") or ""
        if _SETUP_ATTR_RE.search(attrs):
            continue

        lang_match = _LANG_ATTR_RE.search(attrs)
        lang = lang_match.group(1).lower() if lang_match else "js"
        language = SCRIPT_LANGUAGES.get(lang)
        if language is None:
            logger.warning(f"Unsupported script lang '{lang}', skipping block")
            continue

        return ScriptBlock(
            attrs=attrs,
            content=match.group("content"),
            language=language,
            tag_start=match.start(),
            content_start=match.start("content"),
            content_end=match.end("content"),
        )
    return None

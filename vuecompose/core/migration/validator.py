"""Output validation: the assembled source must parse cleanly."""

import logging
from typing import Optional

from ..ast_parser import get_parser
from .models import Diagnostic, DiagnosticCode, Severity

logger = logging.getLogger(__name__)


class OutputValidator:
    def __init__(self, language: str = "javascript"):
        self.language = language

    def validate(self, text: str, file_path: str = "") -> Optional[Diagnostic]:
        """Return an INVALID_OUTPUT diagnostic if ``text`` does not parse, else None."""
        error = get_parser(self.language).validate(text, file_path or "<memory>")
        if error is None:
            return None
        return Diagnostic(
            code=DiagnosticCode.INVALID_OUTPUT,
            message=f"Migrated output does not parse (line {error.line}: {error.message}); original kept",
            file_path=file_path,
            severity=Severity.ERROR,
            line=error.line or None,
        )

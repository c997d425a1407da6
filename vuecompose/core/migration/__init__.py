# VueCompose migration engine - options API → composition API
# Classify → Transform (per category) → Global rewrite → Assemble → Validate

from .engine import MigrationEngine
from .models import Diagnostic, DiagnosticCode, MigrationResult, MigrationStatus, Severity, SymbolTable

__all__ = [
    "MigrationEngine",
    "Diagnostic",
    "DiagnosticCode",
    "MigrationResult",
    "MigrationStatus",
    "Severity",
    "SymbolTable",
]

"""Data contracts for the migration engine.

All structured types passed between the classifier, rewriter, category
transformers, assembler and validator.  Kept as plain dataclasses so a
whole migration can be inspected (and tested) without a parse tree in
hand, except where a node reference is the point.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

import tree_sitter

from ..config import ReservedAccessor


class Category(str, Enum):
    """Closed set of structural roles a component option can play."""
    STATE = "data"
    INPUTS = "props"
    EMITS = "emits"
    SETUP = "setup"
    DATA_FETCHING = "apollo"
    DERIVED = "computed"
    ACTIONS = "methods"
    OBSERVERS = "watch"
    LIFECYCLE = "lifecycle"


class SymbolRole(Enum):
    """Partition of the symbol table a declared name lands in."""
    INPUT = "input"
    STATE = "state"
    DERIVED = "derived"
    ACTION = "action"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticCode(str, Enum):
    IGNORED_OPTION = "ignored_option"
    UNSUPPORTED_SHAPE = "unsupported_shape"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    PENDING_ACCESSOR = "pending_accessor"
    NAME_COLLISION = "name_collision"
    REWRITE_FAILED = "rewrite_failed"
    MISSING_QUERY = "missing_query"
    DROPPED_CODE = "dropped_code"
    INVALID_INPUT = "invalid_input"
    INVALID_OUTPUT = "invalid_output"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable condition reported during migration.

    Carries enough context (file, category, symbol) to triage in bulk
    across a corpus of files.
    """
    code: DiagnosticCode
    message: str
    file_path: str = ""
    category: Optional[str] = None
    symbol: Optional[str] = None
    severity: Severity = Severity.WARNING
    line: Optional[int] = None

    def __str__(self) -> str:
        where = self.file_path or "<memory>"
        if self.line:
            where = f"{where}:{self.line}"
        return f"{self.severity.value.upper()}: {self.message} in {where}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "file_path": self.file_path,
            "category": self.category,
            "symbol": self.symbol,
            "line": self.line,
        }


@dataclass
class ObjectMember:
    """One keyed entry of an object literal: ``key: value``, ``key() {}`` or ``key``.

    For method shorthand ``value`` is the ``method_definition`` node itself;
    for property shorthand it is the identifier.
    """
    name: Optional[str]
    node: tree_sitter.Node
    value: tree_sitter.Node
    indent: int = 0  # indentation of the entry's line; continuation lines are dedented by it

    @property
    def line(self) -> int:
        return self.node.start_point.row + 1


@dataclass
class ComponentDescription:
    """The component options object, in document order."""
    file_path: str
    source: bytes
    export_node: tree_sitter.Node
    options_node: tree_sitter.Node
    entries: List[ObjectMember] = field(default_factory=list)

    def get(self, name: str) -> Optional[ObjectMember]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


@dataclass(frozen=True)
class SymbolTable:
    """Names declared by the component, partitioned by role.

    Built once per component by the classifier and never mutated.
    """
    input_names: FrozenSet[str] = frozenset()
    state_names: FrozenSet[str] = frozenset()
    derived_names: FrozenSet[str] = frozenset()
    action_names: FrozenSet[str] = frozenset()

    def role_of(self, name: str) -> Optional[SymbolRole]:
        if name in self.input_names:
            return SymbolRole.INPUT
        if name in self.state_names:
            return SymbolRole.STATE
        if name in self.derived_names:
            return SymbolRole.DERIVED
        if name in self.action_names:
            return SymbolRole.ACTION
        return None

    def names(self, role: SymbolRole) -> FrozenSet[str]:
        return {
            SymbolRole.INPUT: self.input_names,
            SymbolRole.STATE: self.state_names,
            SymbolRole.DERIVED: self.derived_names,
            SymbolRole.ACTION: self.action_names,
        }[role]


@dataclass(frozen=True)
class RewriteContext:
    """Everything the reference rewriter resolves against."""
    symbols: SymbolTable
    reserved_accessors: Mapping[str, ReservedAccessor] = field(default_factory=dict)
    file_path: str = ""
    # Observer handlers drop the "$" marker instead of flagging the name
    strip_marker: bool = False
    # Names the output binds outside the symbol table (e.g. "emit")
    bindings: FrozenSet[str] = frozenset()

    def observing(self) -> "RewriteContext":
        return replace(self, strip_marker=True)


@dataclass(frozen=True)
class OutputDeclaration:
    """A generated top-level statement.

    ``priority`` orders emission across categories; ``helpers`` names the
    runtime functions the statement calls (each needs an import);
    ``accessors`` the reserved accessors its text now relies on (each
    needs an injection); ``resolved`` is False when self-references were
    left for the global rewrite pass.
    """
    text: str
    category: Category
    symbol: str
    priority: int = 0
    helpers: FrozenSet[str] = frozenset()
    accessors: FrozenSet[str] = frozenset()
    resolved: bool = True


@dataclass
class DeclarationResult:
    """Outcome of transforming one declaration: a statement, diagnostics, or both."""
    symbol: str
    category: Category
    declaration: Optional[OutputDeclaration] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)


class MigrationStatus(str, Enum):
    MIGRATED = "migrated"
    SKIPPED = "skipped"  # no component export, or unparsable input
    ROLLED_BACK = "rolled_back"  # assembled output failed validation


@dataclass
class MigrationResult:
    """Final outcome for one source text."""
    file_path: str
    language: str
    original: str
    output: str
    status: MigrationStatus
    diagnostics: List[Diagnostic] = field(default_factory=list)
    symbols: Optional[SymbolTable] = None

    @property
    def changed(self) -> bool:
        return self.output != self.original

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "language": self.language,
            "status": self.status.value,
            "changed": self.changed,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

"""Symbol classification.

One pass over the component options, in document order, collecting the
names each declaring category introduces.  A name declared twice keeps
its first role; the later declaration is reported and excluded from
emission.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from .categories import CategoryRegistry
from .models import Category, ComponentDescription, Diagnostic, DiagnosticCode, Severity, SymbolRole, SymbolTable

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    symbols: SymbolTable
    diagnostics: List[Diagnostic] = field(default_factory=list)
    # (category, name) pairs that lost a collision and must not be emitted
    shadowed: Set[Tuple[Category, str]] = field(default_factory=set)


class SymbolClassifier:
    """Builds the SymbolTable of one component."""

    def classify(self, component: ComponentDescription) -> Classification:
        """Partition declared names by role.

        Args:
            component: Component options in document order

        Returns:
            Classification with the frozen table, collision diagnostics and
            the declarations shadowed by an earlier one
        """
        names: Dict[SymbolRole, List[str]] = {role: [] for role in SymbolRole}
        owner: Dict[str, Tuple[SymbolRole, Category]] = {}
        diagnostics: List[Diagnostic] = []
        shadowed: Set[Tuple[Category, str]] = set()

        for entry in component.entries:
            spec = CategoryRegistry.lookup(entry.name) if entry.name else None
            if spec is None or spec.declares is None:
                continue

            for name in spec.transformer.declared_names(entry, component.source):
                if name in owner:
                    _, first_category = owner[name]
                    if first_category == spec.category:
                        where = f"twice in {spec.category.value}"
                    else:
                        where = f"in both {first_category.value} and {spec.category.value}"
                    diagnostics.append(Diagnostic(
                        code=DiagnosticCode.NAME_COLLISION,
                        message=f'"{name}" is declared {where}; keeping the first declaration',
                        file_path=component.file_path,
                        category=spec.category.value,
                        symbol=name,
                        severity=Severity.ERROR,
                        line=entry.line,
                    ))
                    if first_category != spec.category:
                        shadowed.add((spec.category, name))
                    continue
                owner[name] = (spec.declares, spec.category)
                names[spec.declares].append(name)

        symbols = SymbolTable(
            input_names=frozenset(names[SymbolRole.INPUT]),
            state_names=frozenset(names[SymbolRole.STATE]),
            derived_names=frozenset(names[SymbolRole.DERIVED]),
            action_names=frozenset(names[SymbolRole.ACTION]),
        )
        logger.debug(
            f"Classified {component.file_path}: "
            f"{len(symbols.input_names)} props, {len(symbols.state_names)} data, "
            f"{len(symbols.derived_names)} computed, {len(symbols.action_names)} methods"
        )
        return Classification(symbols=symbols, diagnostics=diagnostics, shadowed=shadowed)

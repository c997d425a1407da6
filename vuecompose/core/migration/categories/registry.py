"""Category registry.

Simple dict-based registry keyed by option name.  All categories are
registered at import time via ``categories/__init__.py``.  No plugin
discovery, no entry points -- the category set is closed and ships
together.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...constants import EMISSION_ORDER, LIFECYCLE_HOOKS
from ..models import Category, SymbolRole
from .base import CategoryTransformer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategorySpec:
    """Registry entry for one option name."""

    option: str
    transformer: CategoryTransformer

    @property
    def category(self) -> Category:
        return self.transformer.category

    @property
    def declares(self) -> Optional[SymbolRole]:
        return self.transformer.declares

    @property
    def consumes_names(self) -> bool:
        return self.transformer.consumes_names


def emission_priority(option: str) -> int:
    """Fixed emission rank of an option, independent of document order."""
    if option in EMISSION_ORDER:
        return EMISSION_ORDER.index(option) * 100
    if option in LIFECYCLE_HOOKS:
        return (len(EMISSION_ORDER) + list(LIFECYCLE_HOOKS).index(option)) * 100
    raise KeyError(f"No emission priority for option '{option}'")


class CategoryRegistry:
    """Registry of category transformers.

    Class-level store so the engine can call ``CategoryRegistry.lookup(...)``
    without holding an instance.
    """

    _categories: Dict[str, CategorySpec] = {}

    @classmethod
    def register(cls, option: str, transformer: CategoryTransformer) -> None:
        """Register the transformer handling ``option``."""
        cls._categories[option] = CategorySpec(option=option, transformer=transformer)
        logger.debug(f"Registered category: {option} ({transformer.category.value})")

    @classmethod
    def lookup(cls, option: str) -> Optional[CategorySpec]:
        """Get the spec for an option name.  Returns ``None`` if unknown."""
        return cls._categories.get(option)

    @classmethod
    def list_categories(cls) -> List[Dict[str, Any]]:
        """List all registered options with metadata."""
        return [
            {
                "option": spec.option,
                "category": spec.category.value,
                "declares": spec.declares.value if spec.declares else None,
                "consumes_names": spec.consumes_names,
                "priority": emission_priority(spec.option),
            }
            for spec in cls._categories.values()
        ]

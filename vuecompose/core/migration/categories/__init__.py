"""Category transformers.

All categories are registered at import time.  The set is closed:
adding one means adding a module here and a registry entry below.
"""

from ...constants import LIFECYCLE_HOOKS
from .apollo import ApolloTransformer
from .base import CategoryTransformer, TransformContext
from .computed import ComputedTransformer
from .data import DataTransformer
from .emits import EmitsTransformer
from .lifecycle import LifecycleTransformer
from .methods import MethodsTransformer
from .props import PropsTransformer
from .registry import CategoryRegistry, CategorySpec, emission_priority
from .setup import SetupTransformer
from .watch import WatchTransformer

CategoryRegistry.register("data", DataTransformer())
CategoryRegistry.register("props", PropsTransformer())
CategoryRegistry.register("emits", EmitsTransformer())
CategoryRegistry.register("setup", SetupTransformer())
CategoryRegistry.register("apollo", ApolloTransformer())
CategoryRegistry.register("computed", ComputedTransformer())
CategoryRegistry.register("methods", MethodsTransformer())
CategoryRegistry.register("watch", WatchTransformer())

_lifecycle = LifecycleTransformer()
for _hook in LIFECYCLE_HOOKS:
    CategoryRegistry.register(_hook, _lifecycle)

__all__ = [
    "CategoryRegistry",
    "CategorySpec",
    "CategoryTransformer",
    "TransformContext",
    "emission_priority",
]

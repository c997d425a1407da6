"""Shared constants for VueCompose.

This module contains constants that are used across multiple modules
to avoid duplication and ensure consistency.
"""

# =============================================================================
# Component Options
# =============================================================================

# Options recognized but intentionally not migrated
IGNORED_OPTIONS = ("name", "components")

# Lifecycle option → composition hook.  Closed set; order is emission order.
LIFECYCLE_HOOKS = {
    "created": "onCreated",
    "beforeMount": "onBeforeMount",
    "mounted": "onMounted",
    "beforeUpdate": "onBeforeUpdate",
    "updated": "onUpdated",
    "beforeUnmount": "onBeforeUnmount",
    "unmounted": "onUnmounted",
    "errorCaptured": "onErrorCaptured",
}

# Emission order of categorized options, independent of document order.
# Lifecycle hooks follow, in LIFECYCLE_HOOKS order.
EMISSION_ORDER = (
    "data",
    "props",
    "emits",
    "setup",
    "apollo",
    "computed",
    "methods",
    "watch",
)

# =============================================================================
# Self References
# =============================================================================

SELF_ACCESSOR = "this"

# Property names starting with this marker belong to plugins/globals
RESERVED_MARKER = "$"

# =============================================================================
# Generated Bindings
# =============================================================================

PROPS_BINDING = "props"
EMIT_BINDING = "emit"

# Compiler macros need no import
COMPILER_MACROS = frozenset({"defineProps", "defineEmits"})

# Apollo binding sub-options passed straight to useQuery options
APOLLO_PASSTHROUGH_OPTIONS = (
    "fetchPolicy",
    "pollInterval",
    "errorPolicy",
    "notifyOnNetworkStatusChange",
    "context",
    "clientId",
    "debounce",
    "throttle",
)

# Watch option flags carried into the options argument
WATCH_FLAGS = ("deep", "immediate", "flush")

# =============================================================================
# Default Helper Modules
# =============================================================================

DEFAULT_HELPER_MODULES = {
    "ref": "vue",
    "computed": "vue",
    "watch": "vue",
    "inject": "vue",
    **{hook: "vue" for hook in LIFECYCLE_HOOKS.values()},
    "useQuery": "@vue/apollo-composable",
    "gql": "graphql-tag",
}

# Lazy imports to avoid triggering the parser chain.
# This allows targeted imports like `from vuecompose.core.constants import LIFECYCLE_HOOKS`
# without loading tree-sitter grammars.

__all__ = [
    "MigrationEngine",
    "MigrationConfig",
    "ConfigError",
    "load_config",
    "MigrationResult",
    "MigrationStatus",
]

_IMPORT_MAP = {
    "MigrationEngine": ".migration",
    "MigrationResult": ".migration",
    "MigrationStatus": ".migration",
    "MigrationConfig": ".config",
    "ConfigError": ".config",
    "load_config": ".config",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'vuecompose.core' has no attribute {name}")

"""Migration configuration.

Defaults live here; ``config/vuecompose.yaml`` (or an explicit file) may
override them, and a handful of environment variables override both.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .constants import DEFAULT_HELPER_MODULES

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "VUECOMPOSE_CONFIG"
DEFAULT_CONFIG_PATH = Path("config") / "vuecompose.yaml"


class ConfigError(Exception):
    """Raised when a configuration file is missing or malformed."""


@dataclass(frozen=True)
class ReservedAccessor:
    """A ``this.$name`` accessor with a fixed target instead of a symbol lookup.

    The target binding is provided by an injection statement; in
    TypeScript sources the injection is typed with ``type_name``
    imported from ``type_module``.
    """

    name: str  # "$user"
    target: str  # "user"
    inject_key: Optional[str] = None  # defaults to name
    type_name: Optional[str] = None
    type_module: Optional[str] = None

    @property
    def key(self) -> str:
        return self.inject_key or self.name


def _default_accessors() -> Dict[str, ReservedAccessor]:
    return {
        "$user": ReservedAccessor(
            name="$user",
            target="user",
            type_name="GQLUserPlugin",
            type_module="@/plugins/hasura-user",
        ),
    }


@dataclass
class MigrationConfig:
    """Settings shared by every migration in a run."""

    reserved_accessors: Dict[str, ReservedAccessor] = field(default_factory=_default_accessors)
    helper_modules: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HELPER_MODULES))
    auto_import: bool = True
    ignored_options: List[str] = field(default_factory=list)
    jobs: int = 4
    log_level: str = "INFO"

    def module_for(self, helper: str) -> Optional[str]:
        return self.helper_modules.get(helper)


def _parse_accessors(raw: Any) -> Dict[str, ReservedAccessor]:
    if not isinstance(raw, dict):
        raise ConfigError("reserved_accessors must be a mapping")
    accessors = {}
    for name, spec in raw.items():
        if not isinstance(spec, dict) or not spec.get("target"):
            raise ConfigError(f"reserved accessor {name!r} needs a 'target'")
        accessors[name] = ReservedAccessor(
            name=name,
            target=spec["target"],
            inject_key=spec.get("inject_key"),
            type_name=spec.get("type_name"),
            type_module=spec.get("type_module"),
        )
    return accessors


def _apply_yaml(config: MigrationConfig, data: Dict[str, Any]) -> None:
    if "reserved_accessors" in data:
        config.reserved_accessors = _parse_accessors(data["reserved_accessors"] or {})
    if "helper_modules" in data:
        modules = data["helper_modules"] or {}
        if not isinstance(modules, dict):
            raise ConfigError("helper_modules must be a mapping")
        config.helper_modules.update({str(k): str(v) for k, v in modules.items()})
    if "auto_import" in data:
        config.auto_import = bool(data["auto_import"])
    if "ignored_options" in data:
        config.ignored_options = [str(name) for name in data["ignored_options"] or []]
    if "jobs" in data:
        config.jobs = int(data["jobs"])
    if "log_level" in data:
        config.log_level = str(data["log_level"]).upper()


def load_config(path: Optional[str] = None) -> MigrationConfig:
    """Build the effective configuration.

    Resolution order for the YAML file: ``path`` argument, then the
    ``VUECOMPOSE_CONFIG`` environment variable, then
    ``config/vuecompose.yaml`` under the working directory.  Only an
    explicitly named file is required to exist.

    Raises:
        ConfigError: If an explicit file is missing or any file is malformed
    """
    config = MigrationConfig()

    explicit = path or os.getenv(CONFIG_ENV_VAR)
    config_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    if config_path.exists():
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        try:
            _apply_yaml(config, data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {config_path}: {e}") from e
        logger.debug(f"Loaded configuration from {config_path}")
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    env_level = os.getenv("VUECOMPOSE_LOG_LEVEL")
    if env_level:
        config.log_level = env_level.upper()
    env_jobs = os.getenv("VUECOMPOSE_JOBS")
    if env_jobs:
        try:
            config.jobs = int(env_jobs)
        except ValueError:
            logger.warning(f"Ignoring non-integer VUECOMPOSE_JOBS={env_jobs!r}")

    return config

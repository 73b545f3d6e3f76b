from .loader import CONFIG_NAMES, find_config, load_config, load_resolved_config
from .schema import (
    ConfigModel,
    ModuleGlob,
    ResolvedConfig,
    ResolvedRule,
    build_config,
    resolve_defaults,
)

__all__ = [
    "CONFIG_NAMES",
    "ConfigModel",
    "ModuleGlob",
    "ResolvedConfig",
    "ResolvedRule",
    "build_config",
    "find_config",
    "load_config",
    "load_resolved_config",
    "resolve_defaults",
]

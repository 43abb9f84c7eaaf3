"""
Configuration module for chainconf.

ChainedConfig is the session config store; sources loads the layered
YAML files into a ChainedConfig chain; Settings uses pydantic-settings
for environment variable loading.
"""

from chainconf.config.behavior import (
    NODUP_TYPES,
    RESERVED_KEYS,
    ChainedConfig,
    ReservedKeyError,
)
from chainconf.config.lazy import Lazy, deferred
from chainconf.config.settings import Settings, find_project_root
from chainconf.config.sources import ConfigFileError, ConfigLoader

__all__ = [
    "NODUP_TYPES",
    "RESERVED_KEYS",
    "ChainedConfig",
    "ConfigFileError",
    "ConfigLoader",
    "Lazy",
    "ReservedKeyError",
    "Settings",
    "deferred",
    "find_project_root",
]

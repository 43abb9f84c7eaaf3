"""
chainconf - layered configuration for interactive sessions.

A session config is a ChainedConfig whose defaults chain through the
project, user and built-in config files. OutputSink writes session output,
honouring the live `color` setting.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("chainconf")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from chainconf.config import ChainedConfig, Lazy, ReservedKeyError, Settings  # noqa: E402
from chainconf.ui import OutputSink  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "ChainedConfig",
    "Lazy",
    "OutputSink",
    "ReservedKeyError",
    "Settings",
]

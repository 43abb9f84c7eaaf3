"""
Process settings using pydantic-settings.

These settings decide where session config comes from, not what it
contains. They are loaded from:
1. Constructor arguments (highest precedence)
2. Environment variables with CHAINCONF_ prefix
3. .env file named by CHAINCONF_ENV_FILE (if set and present)

Session values (color, prompt_name, ...) live in the layered YAML files
loaded by sources.ConfigLoader.
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import chainconf.config.sources as sources
import chainconf.constants as constants


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only an explicit CHAINCONF_ENV_FILE is honoured. If it is set but the
    file doesn't exist, nothing is loaded rather than falling back silently.
    """
    if env_file := _os.environ.get(f"{constants.ENV_PREFIX}ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """
    Find the nearest directory containing a .chainconf directory or .git.

    Args:
        start_path: Starting path for search. Defaults to cwd.

    Returns:
        The project root, or None if no marker was found up to /.
    """
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    current = start_path.resolve()
    while True:
        for marker in constants.PROJECT_ROOT_MARKERS:
            if (current / marker).exists():
                return current
        if current == current.parent:
            return None
        current = current.parent


class Settings(_pydantic_settings.BaseSettings):
    """
    chainconf process settings.

    All settings can be overridden via environment variables with the
    CHAINCONF_ prefix, e.g. CHAINCONF_LOG_LEVEL=DEBUG. The NO_COLOR
    convention (https://no-color.org) is honoured as well.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    config_dir: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="User config directory (default: ~/.config/chainconf)",
    )

    project_root: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Project root (default: nearest directory with .chainconf or .git)",
    )

    log_level: str = _pydantic.Field(
        default="WARNING",
        description="Level for the stdlib logging root logger",
    )

    no_color: bool = _pydantic.Field(
        default=False,
        validation_alias=_pydantic.AliasChoices(
            "NO_COLOR", f"{constants.ENV_PREFIX}NO_COLOR"
        ),
        description="Disable colored output",
    )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without .env
        interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: _typing.Any) -> str:
        level = str(value).upper()
        if level not in _logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @_pydantic.field_validator("no_color", mode="before")
    @classmethod
    def _validate_no_color(cls, value: _typing.Any) -> bool:
        # NO_COLOR: any non-empty value disables color
        if isinstance(value, str):
            return value.strip() != "" and value.strip().lower() not in ("0", "false")
        return bool(value)

    def resolve_project_root(self) -> _pathlib.Path | None:
        """Return the configured project root or search for one from cwd."""
        if self.project_root is not None:
            return self.project_root
        return find_project_root()

    def loader(self) -> sources.ConfigLoader:
        """Create a ConfigLoader for the configured locations."""
        user_config_path = None
        if self.config_dir is not None:
            user_config_path = self.config_dir / constants.CONFIG_FILE_NAME
        return sources.ConfigLoader(
            self.resolve_project_root(),
            user_config_path=user_config_path,
        )

"""Layered YAML configuration for chainconf sessions.

Configuration layers (in precedence order, highest first):
1. Project config: .chainconf/config.yaml in project root
2. User config: ~/.config/chainconf/config.yaml (or CHAINCONF_CONFIG_DIR)
3. Built-in defaults: bundled defaults/config.yaml

Each loaded file becomes one ChainedConfig whose default is the layer
below it, so the built-in defaults are always the last default of the
chain. A session normally adds one more, initially empty, layer on top:

    >>> chain = ConfigLoader(project_root).load()
    >>> session = config.ChainedConfig(chain)

YAML extensions:
- !env NAME: a Lazy value reading environment variable NAME on every access

Environment variables:
- CHAINCONF_CONFIG_DIR: Override user config directory (default: ~/.config/chainconf)
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

import chainconf.config.behavior as behavior
import chainconf.config.lazy as lazy
import chainconf.constants as constants

_logger = _logging.getLogger(__name__)

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = f"{constants.ENV_PREFIX}CONFIG_DIR"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


# =============================================================================
# YAML loader
# =============================================================================


def _env_constructor(
    loader: _yaml.SafeLoader,
    node: _yaml.Node,
) -> lazy.Lazy:
    """
    Construct a Lazy from the !env tag.

        editor: !env EDITOR

    The variable is read each time the key is read, so changes to the
    environment during a session are picked up. Unset variables read as None.
    """
    if not isinstance(node, _yaml.ScalarNode):
        raise _yaml.constructor.ConstructorError(
            None,
            None,
            "!env expects an environment variable name",
            node.start_mark,
        )
    name = loader.construct_scalar(node)
    if not name:
        raise _yaml.constructor.ConstructorError(
            None,
            None,
            "!env expects an environment variable name",
            node.start_mark,
        )

    def read_env() -> str | None:
        return _os.environ.get(name)

    read_env.__qualname__ = f"env[{name}]"
    return lazy.Lazy(read_env)


class ConfigYamlLoader(_yaml.SafeLoader):
    """
    YAML loader for chainconf config files.

    Extends SafeLoader with the `!env` tag:

        # Re-read on every access
        editor: !env EDITOR
    """

    pass


ConfigYamlLoader.add_constructor("!env", _env_constructor)


def load_yaml(stream: _typing.Any) -> _typing.Any:
    """
    Load YAML with chainconf extensions (!env).

    Args:
        stream: YAML content (string, bytes, or file-like object).
    """
    return _yaml.load(stream, Loader=ConfigYamlLoader)


# =============================================================================
# Layer loading
# =============================================================================


class ConfigLoader:
    """
    Loads the config files into a chain of ChainedConfig layers.

    Layers (lowest to highest precedence):
    1. Built-in defaults (src/chainconf/config/defaults/config.yaml)
    2. User config (~/.config/chainconf/config.yaml)
    3. Project config (.chainconf/config.yaml)
    """

    def __init__(
        self,
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the loader.

        Args:
            project_root: Optional project root path for project-level config.
            user_config_path: Override path for user config file (for testing).
                If not provided, uses CHAINCONF_CONFIG_DIR env var or default XDG path.
            builtin_config_path: Override path for builtin defaults (for testing).
                If not provided, uses the bundled defaults/config.yaml.
        """
        self._project_root = project_root
        self._user_config_path = user_config_path
        self._builtin_config_path = builtin_config_path
        # Layers actually loaded, highest precedence first
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []

    def load(self) -> behavior.ChainedConfig:
        """
        Load all config files and link them into a default chain.

        Returns:
            The highest-precedence layer. Its last_default() is the
            built-in defaults layer.

        Raises:
            ConfigFileError: If the built-in defaults are missing or empty,
                or any file cannot be read or parsed.
        """
        layer_info: list[tuple[str, _pathlib.Path]] = []

        # Layer 1: Built-in defaults (lowest precedence), required
        # Must exist AND have content; anything else is an installation bug.
        builtin_path = self._get_builtin_config_path()
        if not builtin_path.exists():
            raise ConfigFileError(
                builtin_path,
                "built-in defaults not found (possible installation problem)",
            )
        builtin_content = self._load_yaml_file(builtin_path)
        if not builtin_content:
            raise ConfigFileError(
                builtin_path,
                "built-in defaults file is empty (possible installation problem)",
            )
        chain = self._build_layer(builtin_path, builtin_content, None)
        layer_info.append(("built-in", builtin_path))

        # Layer 2: User config, optional
        user_path = self._get_user_config_path()
        if user_path.exists():
            content = self._load_yaml_file(user_path)
            if content:
                chain = self._build_layer(user_path, content, chain)
                layer_info.append(("user", user_path))

        # Layer 3: Project config, optional
        if self._project_root:
            project_path = get_project_config_path(self._project_root)
            if project_path.exists():
                content = self._load_yaml_file(project_path)
                if content:
                    chain = self._build_layer(project_path, content, chain)
                    layer_info.append(("project", project_path))

        layer_info.reverse()
        self._loaded_layers = layer_info
        _logger.debug(
            "Loaded config layers: %s",
            ", ".join(name for name, _ in layer_info),
        )
        return chain

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """
        Get info about layers loaded by the last load() call.

        Returns:
            List of (layer_name, path) tuples, highest precedence first.
        """
        return list(self._loaded_layers)

    def get_layer_paths(self) -> list[tuple[str, _pathlib.Path, bool]]:
        """
        Get info about all config layers.

        Returns:
            List of (layer_name, path, exists) tuples in precedence order
            (highest first: project, user, builtin).
        """
        layers: list[tuple[str, _pathlib.Path, bool]] = []

        if self._project_root:
            project_path = get_project_config_path(self._project_root)
            layers.append(("project", project_path, project_path.exists()))

        user_path = self._get_user_config_path()
        layers.append(("user", user_path, user_path.exists()))

        builtin_path = self._get_builtin_config_path()
        layers.append(("built-in", builtin_path, builtin_path.exists()))

        return layers

    def _build_layer(
        self,
        path: _pathlib.Path,
        content: dict[str, _typing.Any],
        default: behavior.ChainedConfig | None,
    ) -> behavior.ChainedConfig:
        try:
            return behavior.ChainedConfig.from_mapping(content, default)
        except behavior.ReservedKeyError as e:
            raise ConfigFileError(path, str(e)) from e

    def _get_builtin_config_path(self) -> _pathlib.Path:
        if self._builtin_config_path is not None:
            return self._builtin_config_path
        return get_builtin_defaults_path()

    def _get_user_config_path(self) -> _pathlib.Path:
        if self._user_config_path is not None:
            return self._user_config_path
        return get_user_config_path()

    def _load_yaml_file(
        self,
        path: _pathlib.Path,
    ) -> dict[str, _typing.Any] | None:
        """
        Load a YAML file and return its contents as a dict.

        Returns:
            Parsed YAML contents, or None if file is empty.

        Raises:
            ConfigFileError: If the file cannot be read, is malformed YAML,
                or contains non-dict content at the top level.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError as e:
            raise ConfigFileError(path, f"permission denied: {e}") from e
        except OSError as e:
            raise ConfigFileError(path, f"cannot read file: {e}") from e

        try:
            parsed = load_yaml(content)
        except _yaml.YAMLError as e:
            raise ConfigFileError(path, f"invalid YAML: {e}") from e

        if parsed is None:
            return None

        if not isinstance(parsed, dict):
            type_name = type(parsed).__name__
            raise ConfigFileError(
                path,
                f"config must be a YAML mapping (dict), got {type_name}",
            )

        return parsed


def get_builtin_defaults_path() -> _pathlib.Path:
    """Get the path to the built-in defaults config file."""
    return _pathlib.Path(__file__).parent / "defaults" / "config.yaml"


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects CHAINCONF_CONFIG_DIR environment variable if set,
    otherwise uses XDG standard path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / constants.APP_NAME


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / constants.CONFIG_FILE_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to .chainconf/config.yaml within the project."""
    return project_root / constants.PROJECT_DIR_NAME / constants.CONFIG_FILE_NAME

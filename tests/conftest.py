"""
Shared pytest fixtures for chainconf tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import click.testing as _click_testing
import pytest as _pytest

import chainconf.config as config

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "CHAINCONF_CONFIG_DIR",
    "CHAINCONF_PROJECT_ROOT",
    "CHAINCONF_LOG_LEVEL",
    "CHAINCONF_ENV_FILE",
    "CHAINCONF_NO_COLOR",
    "NO_COLOR",
]

BUILTIN_YAML = """\
color: true
prompt_name: builtin
memory_size: 100
history:
  should_save: true
  size: 1000
"""

USER_YAML = """\
prompt_name: user
theme: dark
history:
  size: 500
"""

PROJECT_YAML = """\
prompt_name: project
"""


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with test-related keys removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {k: v for k, v in _os.environ.items() if k not in ENV_KEYS_TO_CLEAR}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def root() -> config.ChainedConfig:
    """A terminal default with a scalar, a list and a nested section."""
    return config.ChainedConfig.from_mapping(
        {
            "greeting": "hello",
            "paths": ["/usr/lib"],
            "history": {"size": 1000},
        }
    )


@_pytest.fixture
def chain(root: config.ChainedConfig) -> config.ChainedConfig:
    """Three-link chain: top -> middle -> root."""
    middle = config.ChainedConfig(root)
    return config.ChainedConfig(middle)


@_pytest.fixture
def config_files(tmp_path: _pathlib.Path) -> dict[str, _pathlib.Path]:
    """
    Built-in, user and project config files in a temporary directory.

    Returns a dict with the paths of each file plus the user config
    directory and the project root.
    """
    builtin = tmp_path / "builtin" / "config.yaml"
    builtin.parent.mkdir()
    builtin.write_text(BUILTIN_YAML)

    user_dir = tmp_path / "user"
    user_dir.mkdir()
    user = user_dir / "config.yaml"
    user.write_text(USER_YAML)

    project_root = tmp_path / "project"
    project = project_root / ".chainconf" / "config.yaml"
    project.parent.mkdir(parents=True)
    project.write_text(PROJECT_YAML)

    return {
        "builtin": builtin,
        "user": user,
        "user_dir": user_dir,
        "project": project,
        "project_root": project_root,
    }


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """Click test runner."""
    return _click_testing.CliRunner()

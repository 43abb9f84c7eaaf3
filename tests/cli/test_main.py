"""Tests for the chainconf command line interface."""

import json as _json
import pathlib as _pathlib
import warnings as _warnings

import pytest as _pytest

import chainconf
import chainconf.cli as cli


@_pytest.fixture
def cli_env(config_files: dict[str, _pathlib.Path]) -> dict[str, str | None]:
    """Environment pointing the CLI at the temporary user and project files."""
    return {
        "CHAINCONF_CONFIG_DIR": str(config_files["user_dir"]),
        "CHAINCONF_PROJECT_ROOT": str(config_files["project_root"]),
        "CHAINCONF_LOG_LEVEL": None,
        "CHAINCONF_ENV_FILE": None,
        "CHAINCONF_NO_COLOR": None,
        "NO_COLOR": None,
    }


class TestCli:
    """Top-level options."""

    def test_version(self, cli_runner) -> None:
        """--version prints the package version."""
        result = cli_runner.invoke(cli.cli, ["--version"])

        assert result.exit_code == 0
        assert chainconf.__version__ in result.output

    def test_help(self, cli_runner) -> None:
        """-h shows the command list."""
        result = cli_runner.invoke(cli.cli, ["-h"])

        assert result.exit_code == 0
        for command in ("show", "get", "path"):
            assert command in result.output

    def test_verbose(self, cli_runner, cli_env) -> None:
        """--verbose does not change the command result."""
        result = cli_runner.invoke(cli.cli, ["--verbose", "get", "prompt_name"], env=cli_env)

        assert result.exit_code == 0

    @_pytest.mark.parametrize("args", [["get", "prompt_name"], ["path", "--all"]])
    def test_no_click_deprecation_warnings(self, cli_runner, cli_env, args) -> None:
        """Commands write to stdout without deprecated click stream helpers."""
        with _warnings.catch_warnings(record=True) as caught:
            _warnings.simplefilter("always")
            result = cli_runner.invoke(cli.cli, args, env=cli_env)

        assert result.exit_code == 0
        messages = [str(w.message) for w in caught if issubclass(w.category, DeprecationWarning)]
        assert not [m for m in messages if "Click 9" in m or "get_text_stream" in m]

    def test_invalid_log_level(self, cli_runner, cli_env) -> None:
        """Bad settings are reported as a usage error."""
        env = {**cli_env, "CHAINCONF_LOG_LEVEL": "chatty"}

        result = cli_runner.invoke(cli.cli, ["get", "prompt_name"], env=env)

        assert result.exit_code != 0
        assert "Invalid settings" in result.output


class TestGet:
    """The get command."""

    def test_top_level_key(self, cli_runner, cli_env) -> None:
        """The project layer wins."""
        result = cli_runner.invoke(cli.cli, ["get", "prompt_name"], env=cli_env)

        assert result.exit_code == 0
        assert result.output == "project\n"

    def test_dotted_key(self, cli_runner, cli_env) -> None:
        """Dotted paths reach into nested sections."""
        result = cli_runner.invoke(cli.cli, ["get", "history.size"], env=cli_env)

        assert result.exit_code == 0
        assert result.output == "500\n"

    def test_builtin_key(self, cli_runner, cli_env) -> None:
        """Keys only in the built-in defaults are found."""
        result = cli_runner.invoke(cli.cli, ["get", "memory_size"], env=cli_env)

        assert result.exit_code == 0
        assert result.output == "100\n"

    def test_section(self, cli_runner, cli_env) -> None:
        """Sections print as key: value lines."""
        result = cli_runner.invoke(cli.cli, ["--no-color", "get", "history"], env=cli_env)

        assert result.exit_code == 0
        assert result.output == "size: 500\n"

    @_pytest.mark.parametrize("key", ["nope", "history.nope", "prompt_name.x"])
    def test_unknown_key(self, cli_runner, cli_env, key: str) -> None:
        """Unknown keys fail with a message."""
        result = cli_runner.invoke(cli.cli, ["get", key], env=cli_env)

        assert result.exit_code == 1
        assert f"Unknown key: {key}" in result.output

    def test_invalid_yaml(self, cli_runner, cli_env, config_files) -> None:
        """Config file errors become CLI errors."""
        config_files["user"].write_text("prompt_name: [unclosed\n")

        result = cli_runner.invoke(cli.cli, ["get", "prompt_name"], env=cli_env)

        assert result.exit_code == 1
        assert "invalid YAML" in result.output


class TestShow:
    """The show command."""

    def test_json(self, cli_runner, cli_env) -> None:
        """--json prints the effective config of all layers."""
        result = cli_runner.invoke(cli.cli, ["--no-color", "show", "--json"], env=cli_env)

        assert result.exit_code == 0
        data = _json.loads(result.output)
        assert data["prompt_name"] == "project"
        assert data["theme"] == "dark"
        assert data["memory_size"] == 100
        assert data["history"] == {"size": 500}
        assert data["color"] is False

    def test_local(self, cli_runner, cli_env) -> None:
        """--local only shows the top config file."""
        result = cli_runner.invoke(cli.cli, ["show", "--local", "--json"], env=cli_env)

        assert result.exit_code == 0
        assert _json.loads(result.output) == {"prompt_name": "project"}

    def test_plain_lines(self, cli_runner, cli_env) -> None:
        """Default output is sorted key: value lines."""
        result = cli_runner.invoke(cli.cli, ["--no-color", "show"], env=cli_env)

        assert result.exit_code == 0
        assert "\x1b[" not in result.output
        assert 'prompt_name: "project"' in result.output
        assert "history:\n  size: 500\n" in result.output

    def test_color_forced(self, cli_runner, cli_env) -> None:
        """--color keeps the key styling."""
        result = cli_runner.invoke(cli.cli, ["--color", "show"], env=cli_env)

        assert result.exit_code == 0
        assert "\x1b[1;36mprompt_name\x1b[0m" in result.output

    def test_no_color_env(self, cli_runner, cli_env) -> None:
        """NO_COLOR turns color off without a flag."""
        env = {**cli_env, "NO_COLOR": "1"}

        result = cli_runner.invoke(cli.cli, ["show"], env=env)

        assert result.exit_code == 0
        assert "\x1b[" not in result.output

    def test_flag_beats_no_color_env(self, cli_runner, cli_env) -> None:
        """--color wins over NO_COLOR."""
        env = {**cli_env, "NO_COLOR": "1"}

        result = cli_runner.invoke(cli.cli, ["--color", "show"], env=env)

        assert result.exit_code == 0
        assert "\x1b[" in result.output


class TestPath:
    """The path command."""

    def test_existing_paths(self, cli_runner, cli_env, config_files) -> None:
        """Only files that exist are listed by default."""
        config_files["user"].unlink()

        result = cli_runner.invoke(cli.cli, ["path"], env=cli_env)

        assert result.exit_code == 0
        assert f"✓ project: {config_files['project']}" in result.output
        assert "user:" not in result.output
        assert "✓ built-in:" in result.output

    def test_all_paths(self, cli_runner, cli_env, config_files) -> None:
        """--all lists missing files too."""
        config_files["user"].unlink()

        result = cli_runner.invoke(cli.cli, ["path", "--all"], env=cli_env)

        assert result.exit_code == 0
        assert f"✗ user: {config_files['user']}" in result.output

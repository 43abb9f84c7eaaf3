"""
Main CLI entry point for chainconf.

Provides the command-line interface using Click. Every command loads the
config chain (built-in, user and project layers), puts an empty session
layer on top and prints through an OutputSink bound to that session.
"""

import json as _json
import logging as _logging
import sys as _sys
import typing as _typing

import click as _click

import chainconf
import chainconf.config as config
import chainconf.ui as ui

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

KEY_STYLE = "bold cyan"
"""Rich style used for keys in `show` output."""


def _configure_logging(level: str) -> None:
    """Send chainconf log records at or above level to stderr."""
    _logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=_sys.stderr,
    )
    _logging.getLogger(chainconf.__name__).setLevel(level)


def _load_session(ctx: _click.Context) -> config.ChainedConfig:
    """
    Load the config chain and return a fresh session layer on top of it.

    The --color/--no-color flag is written to the session layer. Without a
    flag, NO_COLOR turns color off; otherwise the config files decide.
    """
    settings: config.Settings = ctx.obj["settings"]
    try:
        chain = settings.loader().load()
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e

    session = config.ChainedConfig(chain)
    _logger.debug("Session layer created over %r", chain)
    use_color: bool | None = ctx.obj["use_color"]
    if use_color is not None:
        session.color = use_color
    elif settings.no_color:
        session.color = False
    return session


def _session_sink(session: config.ChainedConfig) -> ui.OutputSink:
    return ui.OutputSink(_sys.stdout, session)


def _plain(value: _typing.Any) -> _typing.Any:
    """Convert nested ChainedConfig values into plain dicts and lists."""
    if isinstance(value, config.ChainedConfig):
        return {key: _plain(value[key]) for key in value.keys()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _format_lines(data: dict[str, _typing.Any], indent: int = 0) -> list[str]:
    """Format a plain dict as `key: value` lines, nested dicts indented."""
    lines: list[str] = []
    pad = "  " * indent
    for key in sorted(data):
        value = data[key]
        label = ui.colorize(str(key), KEY_STYLE)
        if isinstance(value, dict):
            lines.append(f"{pad}{label}:")
            lines.extend(_format_lines(value, indent + 1))
        else:
            lines.append(f"{pad}{label}: {_json.dumps(value, default=str)}")
    return lines


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(chainconf.__version__, "-v", "--version", prog_name="chainconf")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging on stderr",
)
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Force colored output on or off (default: config file / NO_COLOR)",
)
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool, use_color: bool | None) -> None:
    """chainconf - layered session configuration.

    Config layers, highest precedence first: project (.chainconf/config.yaml),
    user (~/.config/chainconf/config.yaml), built-in defaults.
    """
    try:
        settings = config.Settings()
    except ValueError as e:
        raise _click.ClickException(f"Invalid settings: {e}") from e

    _configure_logging("DEBUG" if verbose else settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["use_color"] = use_color


@cli.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option(
    "--local",
    "local_only",
    is_flag=True,
    help="Only show keys set by the highest-precedence config file",
)
@_click.pass_context
def show(ctx: _click.Context, as_json: bool, local_only: bool) -> None:
    """Show the effective configuration.

    Examples:
        chainconf show              # All keys, merged across layers
        chainconf show --json       # Same, as JSON
        chainconf show --local      # Only the top config file's own keys
    """
    session = _load_session(ctx)
    sink = _session_sink(session)

    if local_only:
        top = session.default
        data = _plain(top) if top is not None else {}
    else:
        session.eager_load()
        # Keys that only user or project layers define
        link = session.default
        while link is not None:
            for key in link.keys():
                if key not in session:
                    session[key] = session.get(key)
            link = link.default
        data = _plain(session)

    if as_json:
        sink.write_line(_json.dumps(data, indent=2, default=str))
    else:
        sink.write_line(_format_lines(data))


@cli.command(name="get")
@_click.argument("key")
@_click.pass_context
def get_value(ctx: _click.Context, key: str) -> None:
    """Print the value of KEY (dotted paths reach nested sections).

    Examples:
        chainconf get prompt_name
        chainconf get history.file
    """
    session = _load_session(ctx)
    sink = _session_sink(session)

    value: _typing.Any = session
    for part in key.split("."):
        if not isinstance(value, config.ChainedConfig) or not value.resolves(part):
            raise _click.ClickException(f"Unknown key: {key}")
        value = value[part]

    plain = _plain(value)
    if isinstance(plain, dict):
        sink.write_line(_format_lines(plain))
    elif isinstance(plain, str):
        sink.write_line(plain)
    else:
        sink.write_line(_json.dumps(plain, default=str))


@cli.command(name="path")
@_click.option("--all", "show_all", is_flag=True, help="Show all paths even if not found")
@_click.pass_context
def config_path(ctx: _click.Context, show_all: bool) -> None:
    """Show configuration file paths and their status.

    Examples:
        chainconf path        # Show existing config files
        chainconf path --all  # Show all possible paths
    """
    settings: config.Settings = ctx.obj["settings"]
    sink = ui.OutputSink(_sys.stdout)

    for name, path, exists in settings.loader().get_layer_paths():
        if exists or show_all:
            status = "✓" if exists else "✗"
            sink.write_line(f"{status} {name}: {path}")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="chainconf")


if __name__ == "__main__":
    main()

"""
Output stream wrapper for interactive sessions.

OutputSink sits between session code and the real output stream. It turns
write_line() / write() calls into plain text writes and strips ANSI colors
when the session's `color` setting is off. The setting is read on every
write, so toggling it mid-session takes effect immediately.
"""

import io as _io
import sys as _sys
import typing as _typing

import chainconf.ui.text as text

_LINE_TERMINATORS = ("\r\n", "\n", "\r")


def _chomp(value: str) -> str:
    """Remove one trailing line terminator, if present."""
    for terminator in _LINE_TERMINATORS:
        if value.endswith(terminator):
            return value[: -len(terminator)]
    return value


class OutputSink:
    """
    Wraps a writable stream, normalizing lines and stripping color.

    Attributes the sink does not define itself (flush, fileno, encoding,
    ...) are forwarded to the target.

    Args:
        target: Stream to write to (default: sys.stdout).
        config: Object whose `color` attribute decides whether colors are
            kept, usually the session ChainedConfig. Without one, colors
            are always kept.
    """

    __slots__ = ("_target", "_config")

    def __init__(
        self,
        target: _typing.Any = None,
        config: _typing.Any = None,
    ) -> None:
        self._target = target if target is not None else _sys.stdout
        self._config = config

    @classmethod
    def from_config(cls, config: _typing.Any) -> "OutputSink":
        """Create a sink writing to config.output (sys.stdout if unset)."""
        return cls(getattr(config, "output", None), config)

    @property
    def target(self) -> _typing.Any:
        """The wrapped stream."""
        return self._target

    def write_line(self, *objs: _typing.Any) -> None:
        """
        Write each object on its own line.

        Without arguments, writes a single newline. Lists and tuples are
        flattened, one line per element. A trailing newline already present
        on an object is not doubled.
        """
        if not objs:
            self.write("\n")
            return

        for obj in objs:
            if isinstance(obj, (list, tuple)):
                self.write_line(*obj)
            else:
                self.write(f"{_chomp(str(obj))}\n")

    puts = write_line

    def write(self, *objs: _typing.Any) -> None:
        """Write each object as a string, without adding newlines."""
        for obj in objs:
            self._target.write(self.decolorize(str(obj)))

    print = write

    def is_interactive(self) -> bool:
        """Return True if the target reports being a terminal."""
        probe = getattr(self._target, "isatty", None)
        if not callable(probe):
            return False
        try:
            return bool(probe())
        except Exception:
            # Closed or detached streams
            return False

    def color_enabled(self) -> bool:
        """Read the live color setting."""
        if self._config is None:
            return True
        return bool(getattr(self._config, "color", True))

    def decolorize(self, value: str) -> str:
        """Return value unchanged if color is enabled, otherwise strip colors."""
        if self.color_enabled():
            return value
        return text.strip_color(value)

    def __getattr__(self, name: str) -> _typing.Any:
        if name in OutputSink.__slots__:
            raise AttributeError(name)
        try:
            return getattr(self._target, name)
        except AttributeError:
            raise AttributeError(
                f"{type(self._target).__name__} output does not support {name!r}"
            ) from None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(target={self._target!r})"


class CaptureSink(OutputSink):
    """
    A sink that captures output for testing.

    All output is written to an internal StringIO buffer that can be inspected.
    """

    __slots__ = ()

    def __init__(self, config: _typing.Any = None) -> None:
        super().__init__(_io.StringIO(), config)

    def get_output(self) -> str:
        """Get all captured output."""
        return self._target.getvalue()

    def clear(self) -> None:
        """Clear captured output."""
        self._target = _io.StringIO()

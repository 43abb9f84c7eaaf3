"""
Deferred config values.

A Lazy wraps a zero-argument producer. ChainedConfig invokes the producer
every time the value is read, so the result always reflects current state:

    >>> import os
    >>> cfg = ChainedConfig()
    >>> cfg["editor"] = Lazy(lambda: os.environ.get("EDITOR", "vi"))
    >>> cfg["editor"]
    'vi'
"""

from __future__ import annotations

import typing as _typing


class Lazy:
    """A value computed on every read instead of being stored."""

    __slots__ = ("_producer",)

    def __init__(self, producer: _typing.Callable[[], _typing.Any]) -> None:
        if not callable(producer):
            raise TypeError(
                f"Lazy requires a callable, got {type(producer).__name__}"
            )
        self._producer = producer

    def __call__(self) -> _typing.Any:
        return self._producer()

    def __repr__(self) -> str:
        name = getattr(self._producer, "__qualname__", repr(self._producer))
        return f"Lazy({name})"


def deferred(producer: _typing.Callable[[], _typing.Any]) -> Lazy:
    """Decorator form of Lazy.

    Example:
        >>> @deferred
        ... def pager() -> str:
        ...     return os.environ.get("PAGER", "less")
        >>> cfg["pager"] = pager
    """
    return Lazy(producer)


def resolve(value: _typing.Any) -> _typing.Any:
    """Invoke value if it is a Lazy, otherwise return it unchanged."""
    if isinstance(value, Lazy):
        return value()
    return value

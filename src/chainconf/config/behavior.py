"""
ChainedConfig: an attribute-style config store with a chain of defaults.

A ChainedConfig holds its own entries and may link to another ChainedConfig
(its default) that is consulted when a key is not found locally:

    >>> root = ChainedConfig.from_mapping({"greeting": "hello"})
    >>> session = ChainedConfig(root)
    >>> session.greeting
    'hello'

Reading an attribute through the default chain pins a copy of the value
locally, so later mutation of the returned object never reaches the
default:

    >>> root = ChainedConfig.from_mapping({"paths": ["/usr/lib"]})
    >>> session = ChainedConfig(root)
    >>> session.paths.append("/opt/lib")
    >>> root.paths
    ['/usr/lib']

Chain semantics:
- A local entry always shadows the same key further down the chain.
- The last link of the chain (see last_default()) holds the "factory
  defaults". forget() clears a key from this config and from every
  intermediate default, but never from the last one.
- Defaults are shared references, not snapshots. Pinning through an
  intermediate default and forget() both mutate that default in place,
  which is visible to every config linked to it.

Thread safety: NOT thread-safe. Configs are meant for single-writer use
within one interactive session.
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import dataclasses as _dataclasses
import io as _io
import logging as _logging
import numbers as _numbers
import types as _types
import typing as _typing

import chainconf.config.lazy as _lazy

_logger = _logging.getLogger(__name__)

# Public operation names of ChainedConfig. None of them may be used as a
# key, otherwise attribute access could never reach the stored value.
RESERVED_KEYS: frozenset[str] = frozenset(
    {
        "assign",
        "clear",
        "default",
        "eager_load",
        "forget",
        "from_mapping",
        "get",
        "keys",
        "last_default",
        "merge",
        "resolves",
        "set",
        "to_dict",
    }
)

# Values of these types are returned as-is when read through a default
# instead of being deep-copied.
NODUP_TYPES: tuple[type, ...] = (
    bool,
    type(None),
    _numbers.Number,
    str,
    bytes,
    type,
    _types.ModuleType,
    _types.FunctionType,
    _types.BuiltinFunctionType,
    _types.MethodType,
    _io.IOBase,
    _lazy.Lazy,
)


class ReservedKeyError(RuntimeError):
    """Raised when a key collides with one of ChainedConfig's own operations."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"It is not possible to use '{key}' as a key name, "
            "please choose a different key name."
        )


def _dup(value: _typing.Any) -> _typing.Any:
    """Deep copy value unless its type is in NODUP_TYPES."""
    if isinstance(value, NODUP_TYPES):
        return value
    try:
        return _copy.deepcopy(value)
    except (TypeError, _copy.Error) as e:
        # Handles such as sockets or locks cannot be copied; share them.
        _logger.debug("Sharing uncopyable %s: %s", type(value).__name__, e)
        return value


def _to_mapping(obj: _typing.Any) -> _abc.Mapping[_typing.Any, _typing.Any] | None:
    """
    Convert obj to a mapping, or return None if that is not possible.

    Accepts mappings, objects with a to_dict() method (ChainedConfig),
    pydantic models, dataclass instances and iterables of key/value pairs.
    """
    if isinstance(obj, _abc.Mapping):
        return obj
    if obj is None or isinstance(obj, (str, bytes)):
        return None

    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        result = to_dict()
        return result if isinstance(result, _abc.Mapping) else None

    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        result = model_dump()
        return result if isinstance(result, _abc.Mapping) else None

    if _dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _dataclasses.asdict(obj)

    if not isinstance(obj, _abc.Iterable):
        return None
    pairs = list(obj)
    if not all(isinstance(pair, (tuple, list)) and len(pair) == 2 for pair in pairs):
        return None
    try:
        return dict(pairs)
    except TypeError:
        # Unhashable keys
        return None


class ChainedConfig:
    """
    A string-keyed config store that falls back to a chain of defaults.

    Keys can be read and written as items or attributes:

        >>> cfg = ChainedConfig()
        >>> cfg.color = True
        >>> cfg["color"]
        True
        >>> cfg.undefined is None
        True

    Args:
        default: Config consulted when a key is missing locally, or None.
            The default is a shared reference and cannot be changed after
            construction.

    Note:
        Attribute names starting with an underscore are never routed to
        config entries. Such keys can still be used via item access.
    """

    __slots__ = ("_default", "_lookup")

    def __init__(self, default: ChainedConfig | None = None) -> None:
        if default is not None and not isinstance(default, ChainedConfig):
            raise TypeError(
                f"default must be a ChainedConfig or None, got {type(default).__name__}"
            )
        object.__setattr__(self, "_default", default)
        object.__setattr__(self, "_lookup", {})

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_mapping(
        cls,
        attributes: _abc.Mapping[_typing.Any, _typing.Any],
        default: ChainedConfig | None = None,
    ) -> _typing.Self:
        """
        Build a config from a mapping, converting nested mappings recursively.

        Nested mappings (and mappings inside lists) become configs of their
        own, without a default.

        Example:
            >>> cfg = ChainedConfig.from_mapping({"history": {"size": 100}})
            >>> cfg.history.size
            100

        Raises:
            ReservedKeyError: If any key, at any depth, is reserved.
        """
        config = cls(default)
        for key, value in attributes.items():
            if isinstance(value, _abc.Mapping):
                value = cls.from_mapping(value)
            elif isinstance(value, list):
                value = [
                    cls.from_mapping(item) if isinstance(item, _abc.Mapping) else item
                    for item in value
                ]
            config.set(key, value)
        return config

    @classmethod
    def assign(
        cls,
        attributes: _typing.Any,
        default: ChainedConfig | None = None,
    ) -> _typing.Self:
        """
        Build a config from attributes without visiting nested values.

        Example:
            >>> cfg = ChainedConfig.assign({"history": {"size": 100}})
            >>> cfg.history
            {'size': 100}
        """
        config = cls(default)
        config.merge(attributes)
        return config

    # =========================================================================
    # Core operations
    # =========================================================================

    @property
    def default(self) -> ChainedConfig | None:
        """The config queried when a key is not found locally."""
        return self._default

    def get(self, key: _typing.Any) -> _typing.Any:
        """
        Return the value for key, or None if no link in the chain has it.

        Values found in the default chain are returned as copies (see
        NODUP_TYPES) but are not stored locally. Lazy values are invoked on
        every call.
        """
        key = str(key)
        if key in self._lookup:
            value = self._lookup[key]
        elif self._default is not None:
            value = _dup(self._default.get(key))
        else:
            value = None
        return _lazy.resolve(value)

    def set(self, key: _typing.Any, value: _typing.Any) -> None:
        """
        Store value under key. The value is stored as-is, without copying.

        Raises:
            ReservedKeyError: If key is one of RESERVED_KEYS.
        """
        key = str(key)
        if key in RESERVED_KEYS:
            raise ReservedKeyError(key)
        self._lookup[key] = value

    def forget(self, key: _typing.Any) -> None:
        """
        Remove key so the next lookup traverses back to the default chain.

        The key is also forgotten by every intermediate default, but the
        last default keeps it:

            >>> root = ChainedConfig.from_mapping({"prompt": "pry"})
            >>> cfg = ChainedConfig(root)
            >>> cfg.prompt = "foo"
            >>> cfg.forget("prompt")
            >>> cfg.prompt
            'pry'
        """
        key = str(key)
        self._lookup.pop(key, None)
        default = self._default
        if default is not None and default is not self.last_default():
            _logger.debug("Forgetting %r in intermediate default", key)
            default.forget(key)

    def merge(self, other: _typing.Any) -> None:
        """
        Set every key/value pair of other on self.

        Args:
            other: A mapping, a ChainedConfig, a pydantic model, a dataclass
                instance or an iterable of key/value pairs.

        Raises:
            TypeError: If other cannot be converted to a mapping.
            ReservedKeyError: If other contains a reserved key.
        """
        mapping = _to_mapping(other)
        if mapping is None:
            raise TypeError(
                f"unable to convert {type(other).__name__} argument into a mapping"
            )
        for key, value in mapping.items():
            self.set(key, value)

    def clear(self) -> None:
        """Remove all local entries. The default chain is untouched."""
        self._lookup.clear()

    def keys(self) -> list[str]:
        """Return the keys stored locally."""
        return list(self._lookup)

    def resolves(self, key: _typing.Any) -> bool:
        """Return True if key is stored locally or anywhere in the default chain."""
        key = str(key)
        if key in self._lookup:
            return True
        return self._default is not None and self._default.resolves(key)

    def eager_load(self) -> list[str] | None:
        """
        Copy every key of last_default() into self.

        Each key is read with attribute semantics, so lazy values are
        resolved and values inherited through the chain are pinned locally.
        Keys already stored locally keep their (resolved) local value.

        Returns:
            The keys loaded, or None if there is no default.
        """
        last = self.last_default()
        if last is None:
            return None

        keys = last.keys()
        for key in keys:
            self.set(key, self._read_attribute(key))
        _logger.debug("Eager loaded %d keys from last default", len(keys))
        return keys

    def last_default(self) -> ChainedConfig | None:
        """Return the last config in the default chain, or None if there is none."""
        last = self._default
        while last is not None and last._default is not None:
            last = last._default
        return last

    def to_dict(self) -> dict[str, _typing.Any]:
        """Return a shallow copy of the local entries."""
        return dict(self._lookup)

    # =========================================================================
    # Attribute adapter
    # =========================================================================

    def _read_attribute(self, name: str) -> _typing.Any:
        """
        Read name with attribute semantics.

        A value found through the default is copied and pinned locally.
        """
        if name in self._lookup:
            return self.get(name)
        if self._default is not None and self._default.resolves(name):
            value = _dup(self._default._read_attribute(name))
            self.set(name, value)
            _logger.debug("Pinned %r from default", name)
            return value
        return None

    def __getattr__(self, name: str) -> _typing.Any:
        if name.startswith("_"):
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )
        return self._read_attribute(name)

    def __setattr__(self, name: str, value: _typing.Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self.set(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        self.forget(name)

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        link: ChainedConfig | None = self
        while link is not None:
            names.update(key for key in link._lookup if key.isidentifier())
            link = link._default
        return sorted(names)

    # =========================================================================
    # Container protocol
    # =========================================================================

    def __getitem__(self, key: _typing.Any) -> _typing.Any:
        return self.get(key)

    def __setitem__(self, key: _typing.Any, value: _typing.Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: _typing.Any) -> None:
        self.forget(key)

    def __contains__(self, key: object) -> bool:
        """Check the local entries only. Use resolves() to search the chain."""
        return str(key) in self._lookup

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(list(self._lookup))

    def __len__(self) -> int:
        return len(self._lookup)

    def __eq__(self, other: object) -> bool:
        """Compare local entries with other converted to a mapping."""
        if other is None:
            return False
        mapping = _to_mapping(other)
        if mapping is None:
            return False
        return self._lookup == dict(mapping)

    def __hash__(self) -> int:
        """Not hashable (entries are mutable)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")

    def __copy__(self) -> ChainedConfig:
        new = type(self)(self._default)
        new._lookup.update(self._lookup)
        return new

    def __deepcopy__(self, memo: dict[int, _typing.Any]) -> ChainedConfig:
        # Entries are copied, the default stays a shared reference.
        new = type(self)(self._default)
        memo[id(self)] = new
        for key, value in self._lookup.items():
            new._lookup[key] = _copy.deepcopy(value, memo)
        return new

    # =========================================================================
    # Representation
    # =========================================================================

    def __repr__(self) -> str:
        key_str = ",".join(f"'{key}'" for key in self._lookup)
        return (
            f"<{type(self).__name__}:{id(self):#x} "
            f"keys=[{key_str}] default={self._default!r}>"
        )

    def __rich_repr__(self) -> _typing.Iterator[tuple[str, _typing.Any]]:
        """Support rich.pretty output of the key list and the chain."""
        yield "keys", self.keys()
        yield "default", self._default

    __rich_repr__.angular = True  # type: ignore[attr-defined]

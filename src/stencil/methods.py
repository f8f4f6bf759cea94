"""Method registry - helpers shared by every template of an engine.

Compiled units bind a free variable to the registry when its name was
registered at compile time, and look the callable up at call time.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Mapping


def each(items: Any, callback: Callable[[Any, Any], Any]) -> None:
    """Call ``callback(value, index)`` for every item.

    Mappings are walked as ``callback(value, key)``; None is an empty
    sequence.
    """
    if items is None:
        return
    if isinstance(items, Mapping):
        for key, item in items.items():
            callback(item, key)
    else:
        for index, item in enumerate(items):
            callback(item, index)


def value(obj: Any) -> str:
    """Coerce a value for output: None renders as the empty string."""
    return "" if obj is None else str(obj)


class MethodRegistry(Mapping[str, Callable[..., Any]]):
    """Name -> callable mapping.

    Pre-seeded with the internal helpers ``_each`` and ``_value``; the
    owning engine adds ``_render``. Entries can be replaced but never
    removed.
    """

    def __init__(self, methods: Mapping[str, Callable[..., Any]] | None = None):
        self._methods: dict[str, Callable[..., Any]] = {
            "_each": each,
            "_value": value,
        }
        for name, fn in (methods or {}).items():
            self.register(name, fn)

    def register(self, name: str, fn: Callable[..., Any]) -> None:
        if not name.isidentifier():
            raise ValueError(f"Method name must be an identifier: {name!r}")
        if not callable(fn):
            raise TypeError(f"Method '{name}' must be callable")
        self._methods[name] = fn

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._methods[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __repr__(self) -> str:
        return f"MethodRegistry({sorted(self._methods)})"

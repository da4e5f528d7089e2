"""A mapping that remembers the order of keys in the JSON object it came from."""

from __future__ import annotations

import json
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


class WithOrder(Generic[T]):
    """A string keyed mapping that keeps the order in which keys were read."""

    def __init__(self, pairs: Iterable[tuple[str, T]] = ()) -> None:
        self._values: dict[str, T] = {}
        self._keys: list[str] = []
        for key, value in pairs:
            self._keys.append(key)
            self._values[key] = value

    def ordered_keys(self) -> list[str]:
        """Keys in the order they were read."""
        return list(self._keys)

    def ordered_values(self) -> list[T]:
        """Values in the order their keys were read."""
        return [self._values[key] for key in self._keys]

    def get(self, key: str) -> Optional[T]:
        """The value for ``key``, or ``None`` when the key is absent."""
        return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> T:
        return self._values[key]

    def __repr__(self) -> str:
        items = ", ".join(f"{key!r}: {self._values[key]!r}" for key in self._keys)
        return f"WithOrder({{{items}}})"


class _Pairs(list):
    """Marker for a decoded JSON object kept as key/value pairs."""


def _to_plain(value: Any) -> Any:
    if isinstance(value, _Pairs):
        return {key: _to_plain(item) for key, item in value}
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    return value


def load_with_order(
    data: str | bytes | bytearray,
    factory: Optional[Callable[[Any], T]] = None,
) -> WithOrder[T]:
    """Decode a JSON object, keeping key order and converting values with ``factory``.

    ``null`` values stay ``None`` and are not passed to ``factory``.
    """
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    parsed = json.loads(data, object_pairs_hook=_Pairs)
    if not isinstance(parsed, _Pairs):
        raise ValueError("expected a JSON object")

    def convert(value: Any) -> Any:
        if value is None:
            return None
        plain = _to_plain(value)
        return factory(plain) if factory is not None else plain

    return WithOrder((key, convert(value)) for key, value in parsed)
"""Turn rotation over insertion-ordered player maps."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import TypeVar

K = TypeVar("K", bound=Hashable)


def next_key(mapping: Mapping[K, object], key: K | None = None) -> K | None:
    """Key following ``key`` in insertion order, wrapping to the first.

    With no key (or one that is not present) the first key is returned; an
    empty mapping yields ``None``.
    """
    keys = list(mapping)
    if not keys:
        return None
    if key is None or key not in mapping:
        return keys[0]
    return keys[(keys.index(key) + 1) % len(keys)]

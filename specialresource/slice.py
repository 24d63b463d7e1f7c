"""Small helpers for string lists."""

from __future__ import annotations

from collections.abc import Sequence


def find(items: Sequence[str], value: str) -> int:
    """Return the smallest index of ``value`` in ``items``, or ``len(items)`` if absent."""
    return next((i for i, item in enumerate(items) if item == value), len(items))


def contains(items: Sequence[str], value: str) -> bool:
    """Tell whether ``items`` holds ``value``."""
    return value in items


def find_cr_file(names: Sequence[str], value: str) -> int:
    """Return the index of the file named ``<value>.yaml``, or -1 if there is none."""
    target = value + ".yaml"
    return next((i for i, name in enumerate(names) if name == target), -1)


def insert(items: Sequence[str], index: int, value: str) -> list[str]:
    """Return a new list with ``value`` inserted before position ``index``.

    ``index`` may equal the length of ``items`` to append; anything outside
    ``0..len(items)`` raises IndexError.
    """
    if not 0 <= index <= len(items):
        raise IndexError(f"insert index {index} out of range for length {len(items)}")
    result = list(items)
    result.insert(index, value)
    return result
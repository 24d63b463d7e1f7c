"""Naming of state annotations derived from chart template files."""

from __future__ import annotations

STATE_PREFIX = "specialresource.openshift.io/state-"


def _base(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    return stripped.rsplit("/", 1)[-1]


def generate_name(file_name: str, sr: str) -> str:
    """Return the state name for a template file of special resource ``sr``.

    The sequence is the first four characters of the file's base name.
    """
    base = _base(file_name)
    if len(base) < 4:
        raise ValueError(f"file name {file_name!r} is too short to hold a state sequence")
    return f"{STATE_PREFIX}{sr}-{base[:4]}"
"""Splitting of multi-document YAML manifests on ``---`` lines."""

from __future__ import annotations

from collections.abc import Iterator

_SEPARATOR = b"---"


def _lines(data: bytes) -> Iterator[bytes]:
    pieces = data.split(b"\n")
    tail = pieces.pop()
    for piece in pieces:
        if piece.endswith(b"\r"):
            piece = piece[:-1]
        yield piece + b"\n"
    if tail:
        yield tail + b"\n"


def _is_separator(line: bytes) -> bool:
    return line.startswith(_SEPARATOR) and not line[len(_SEPARATOR):].strip()


class YAMLScanner:
    """Iterate over the documents of a YAML manifest.

    A line that begins with ``---`` followed only by whitespace ends a
    document. A separator met before any content stays part of the next
    document. Every line of a document ends with a newline.
    """

    def __init__(self, data: bytes | str) -> None:
        self._data = data.encode() if isinstance(data, str) else bytes(data)

    def __iter__(self) -> Iterator[bytes]:
        buffer = bytearray()
        for line in _lines(self._data):
            if _is_separator(line) and buffer:
                yield bytes(buffer)
                buffer = bytearray()
                continue
            buffer += line
        if buffer:
            yield bytes(buffer)


def split_documents(data: bytes | str) -> list[bytes]:
    """Return the documents of a YAML manifest as a list."""
    return list(YAMLScanner(data))
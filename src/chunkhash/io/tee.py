"""Stream plumbing around :class:`~chunkhash.writer.HashingWriter`."""

from __future__ import annotations

from typing import BinaryIO

from chunkhash.writer import HashingWriter

DEFAULT_READ_SIZE = 64 * 1024


class NullSink:
    """Destination sink that discards everything it is given."""

    def write(self, data: bytes) -> int:
        return len(data)


class HashingReader:
    """Readable wrapper that tees every byte it returns into a writer."""

    def __init__(self, source: BinaryIO, writer: HashingWriter) -> None:
        self._source = source
        self._writer = writer

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        data = self._source.read(size)
        if data:
            self._writer.write(data)
        return data


def copy_stream(source: BinaryIO, writer: HashingWriter, *, read_size: int = DEFAULT_READ_SIZE) -> int:
    """Pump `source` into `writer` until EOF and return the number of bytes copied."""

    copied = 0
    for chunk in iter(lambda: source.read(read_size), b""):
        copied += writer.write(chunk)
    return copied


__all__ = ["DEFAULT_READ_SIZE", "HashingReader", "NullSink", "copy_stream"]

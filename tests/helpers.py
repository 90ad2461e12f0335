from __future__ import annotations

import hashlib

PATTERN = b"hello, world!"
REPEATS = 65536
PAYLOAD = PATTERN * REPEATS


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def reference_events(data: bytes, step: int) -> list[tuple[int, bytes]]:
    """Chunk digests of `data` for a fixed step, computed without the writer."""

    events = []
    for start in range(0, len(data), step):
        end = min(start + step, len(data))
        events.append((end, sha256(data[start:end])))
    return events


class ListSink:
    """Sink recording every write; optionally fails or short-writes on a given call."""

    def __init__(self, *, fail_on: int | None = None, short_on: int | None = None, short_by: int = 1) -> None:
        self.buffer = bytearray()
        self.calls = 0
        self.fail_on = fail_on
        self.short_on = short_on
        self.short_by = short_by

    def write(self, data) -> int:
        self.calls += 1
        if self.calls == self.fail_on:
            raise OSError("disk full")
        chunk = bytes(data)
        if self.calls == self.short_on:
            chunk = chunk[: max(len(chunk) - self.short_by, 0)]
        self.buffer.extend(chunk)
        return len(chunk)

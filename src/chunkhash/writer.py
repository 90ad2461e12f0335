"""Pass-through writer that digests its stream in boundary-delimited chunks.

Bytes written to a :class:`HashingWriter` are forwarded unmodified to a
destination sink and fed to the current hash accumulator. Whenever the
cumulative count reaches the next boundary, the chunk digest is handed to the
digest callback and a fresh accumulator is started. :meth:`HashingWriter.close`
emits the digest of a trailing partial chunk, if any.

Instances are single-use and not thread-safe; calls must be sequential.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, BinaryIO, Optional, Union

from chunkhash.boundaries import BoundarySource, as_boundary_source
from chunkhash.errors import (
    AccumulatorError,
    BoundaryError,
    DigestCallbackError,
    ShortWriteError,
    SinkError,
)
from chunkhash.hashing import HashAccumulator, HashFactory

logger = logging.getLogger(__name__)

DigestCallback = Callable[[int, bytes], Any]


class HashingWriter:
    """Forward writes to `sink` while emitting one digest per chunk."""

    def __init__(
        self,
        sink: BinaryIO,
        new_hash: HashFactory,
        next_stop: Union[BoundarySource, Iterable[int]],
        on_digest: DigestCallback,
    ) -> None:
        self._sink = sink
        self._new_hash = new_hash
        self._next_boundary = as_boundary_source(next_stop)
        self._on_digest = on_digest

        self._bytes_written = 0
        self._bytes_summed = 0
        self._closed = False
        self._next_stop = self._pull_boundary(written=0)
        self._hash: HashAccumulator = new_hash()

    @property
    def bytes_written(self) -> int:
        """Cumulative bytes forwarded to the sink."""
        return self._bytes_written

    @property
    def bytes_summed(self) -> int:
        """Cumulative bytes covered by digests already emitted."""
        return self._bytes_summed

    @property
    def next_stop(self) -> Optional[int]:
        """Next boundary offset, or ``None`` once the boundary source is exhausted."""
        return self._next_stop

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def write(self, data: bytes) -> int:
        """Forward `data`, emitting a digest at every boundary it reaches.

        Returns ``len(data)``. On failure a :class:`~chunkhash.errors.ChunkWriteError`
        subclass is raised whose ``written`` attribute holds the bytes of this
        call that reached the sink.
        """

        if self._closed:
            raise ValueError("write to closed HashingWriter")

        view = memoryview(data).cast("B")
        total = 0
        while total < len(view):
            run = view[total:]
            if self._next_stop is not None:
                run = run[: self._next_stop - self._bytes_written]

            accepted = self._forward(run, written=total)
            self._update(run[:accepted], written=total)
            self._bytes_written += accepted
            total += accepted

            if accepted < len(run):
                raise ShortWriteError(
                    f"sink accepted {accepted} of {len(run)} bytes at offset {self._bytes_written}",
                    written=total,
                    offset=self._bytes_written,
                )

            if self._bytes_written == self._next_stop:
                self._emit(written=total)
                self._bytes_summed = self._bytes_written
                self._next_stop = self._pull_boundary(written=total)
                self._hash = self._new_hash()
        return total

    def close(self) -> None:
        """Emit the digest of the trailing partial chunk, if any.

        The destination sink is left open. Calling ``close`` again is a no-op.
        """

        if self._closed:
            return
        self._closed = True
        if self._bytes_summed != self._bytes_written:
            logger.debug("Flushing trailing chunk at offset %s", self._bytes_written)
            self._emit(written=0)
            self._bytes_summed = self._bytes_written

    def __enter__(self) -> "HashingWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self._closed = True

    def _forward(self, run: memoryview, *, written: int) -> int:
        try:
            accepted = self._sink.write(run)
        except Exception as exc:
            raise SinkError(
                f"sink write failed at offset {self._bytes_written}: {exc}",
                written=written,
                offset=self._bytes_written,
                error=exc,
            ) from exc
        if accepted is None:
            return len(run)
        return accepted

    def _update(self, run: memoryview, *, written: int) -> None:
        if not run:
            return
        try:
            self._hash.update(run)
        except Exception as exc:
            raise AccumulatorError(
                f"hash update failed at offset {self._bytes_written}: {exc}",
                written=written + len(run),
                offset=self._bytes_written + len(run),
                error=exc,
            ) from exc

    def _emit(self, *, written: int) -> None:
        offset = self._bytes_written
        digest = self._hash.digest()
        logger.debug("Chunk complete at offset %s", offset)
        try:
            self._on_digest(offset, digest)
        except Exception as exc:
            raise DigestCallbackError(
                f"digest callback failed at offset {offset}: {exc}",
                written=written,
                offset=offset,
                error=exc,
            ) from exc

    def _pull_boundary(self, *, written: int) -> Optional[int]:
        stop = self._next_boundary()
        if stop is None:
            logger.debug("Boundary source exhausted at offset %s", self._bytes_written)
            return None
        if stop <= self._bytes_written:
            raise BoundaryError(
                f"boundary {stop} does not advance past offset {self._bytes_written}",
                written=written,
                offset=self._bytes_written,
            )
        return stop


__all__ = ["DigestCallback", "HashingWriter"]

"""Exception hierarchy for chunked hashing streams."""

from __future__ import annotations


class ChunkhashError(Exception):
    """Base class for every error raised by chunkhash."""


class ChunkWriteError(ChunkhashError):
    """A collaborator failed while the writer was processing a call.

    ``written`` is the number of bytes of the failing call that reached the
    destination sink, ``offset`` the cumulative stream position at the fault,
    and ``error`` the collaborator's own exception (also chained as
    ``__cause__``).
    """

    layer = "writer"

    def __init__(self, message: str, *, written: int, offset: int, error: BaseException | None = None) -> None:
        super().__init__(message)
        self.written = written
        self.offset = offset
        self.error = error


class SinkError(ChunkWriteError):
    """The destination sink raised while accepting bytes."""

    layer = "sink"


class ShortWriteError(SinkError):
    """The destination sink accepted fewer bytes than offered."""


class AccumulatorError(ChunkWriteError):
    """The hash accumulator rejected an update."""

    layer = "accumulator"


class DigestCallbackError(ChunkWriteError):
    """The digest callback rejected a completed chunk."""

    layer = "callback"


class BoundaryError(ChunkWriteError):
    """The boundary source produced an offset at or behind the stream position."""

    layer = "boundary"


class DigestMismatchError(ChunkhashError):
    """A chunk digest differs from the expected value."""

    def __init__(self, offset: int, message: str | None = None) -> None:
        super().__init__(message or f"bad digest at offset {offset}")
        self.offset = offset


class UnsupportedAlgorithmError(ChunkhashError, ValueError):
    """Requested hash algorithm is not available."""


class ManifestError(ChunkhashError):
    """Digest manifest could not be read or is malformed."""


__all__ = [
    "AccumulatorError",
    "BoundaryError",
    "ChunkWriteError",
    "ChunkhashError",
    "DigestCallbackError",
    "DigestMismatchError",
    "ManifestError",
    "ShortWriteError",
    "SinkError",
    "UnsupportedAlgorithmError",
]

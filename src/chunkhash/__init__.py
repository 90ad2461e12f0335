"""Pass-through writer emitting one digest per boundary-delimited chunk."""

from .boundaries import as_boundary_source, at_offsets, every, from_sizes
from .digests import DigestEvent, DigestRecorder, DigestVerifier, fan_out
from .errors import (
    AccumulatorError,
    BoundaryError,
    ChunkWriteError,
    ChunkhashError,
    DigestCallbackError,
    DigestMismatchError,
    ShortWriteError,
    SinkError,
)
from .hashing import hash_factory
from .writer import HashingWriter

__all__ = [
    "AccumulatorError",
    "BoundaryError",
    "ChunkWriteError",
    "ChunkhashError",
    "DigestCallbackError",
    "DigestEvent",
    "DigestMismatchError",
    "DigestRecorder",
    "DigestVerifier",
    "HashingWriter",
    "ShortWriteError",
    "SinkError",
    "as_boundary_source",
    "at_offsets",
    "every",
    "fan_out",
    "from_sizes",
    "hash_factory",
]

"""Hash accumulator factories and reference digest helpers."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from blake3 import blake3

from chunkhash.errors import UnsupportedAlgorithmError

DEFAULT_ALGORITHM = "sha256"


@runtime_checkable
class HashAccumulator(Protocol):
    """Incremental hash object following the :mod:`hashlib` protocol."""

    def update(self, data: bytes, /) -> None:
        """Feed ``data`` into the running digest."""
        ...

    def digest(self) -> bytes:
        """Return the digest of everything fed so far."""
        ...


HashFactory = Callable[[], HashAccumulator]


def available_algorithms() -> list[str]:
    """Return the sorted algorithm names accepted by :func:`hash_factory`."""
    names = {name.lower() for name in hashlib.algorithms_available}
    names.add("blake3")
    return sorted(names)


def hash_factory(algorithm: str = DEFAULT_ALGORITHM) -> HashFactory:
    """Return a zero-argument factory producing fresh accumulators for `algorithm`."""

    name = algorithm.strip().lower()
    if name == "blake3":
        return blake3
    try:
        hashlib.new(name)
    except (ValueError, TypeError) as exc:
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm {algorithm!r}") from exc
    if name.startswith("shake_"):
        # variable-length digests need an explicit length
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm {algorithm!r}")

    def _new() -> HashAccumulator:
        return hashlib.new(name)

    return _new


def digest_bytes(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """Return the one-shot digest of `data`."""
    accumulator = hash_factory(algorithm)()
    accumulator.update(data)
    return accumulator.digest()


def file_digest(path: Path, algorithm: str = DEFAULT_ALGORITHM, *, read_size: int = 8192) -> bytes:
    """Return the digest of the whole file at `path`."""
    accumulator = hash_factory(algorithm)()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(read_size), b""):
            accumulator.update(chunk)
    return accumulator.digest()


__all__ = [
    "DEFAULT_ALGORITHM",
    "HashAccumulator",
    "HashFactory",
    "available_algorithms",
    "digest_bytes",
    "file_digest",
    "hash_factory",
]

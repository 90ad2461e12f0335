"""Digest events and ready-made digest callbacks."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from chunkhash.errors import DigestMismatchError


@dataclass(frozen=True)
class DigestEvent:
    """Digest of one completed chunk ending at cumulative `offset`."""

    offset: int
    digest: bytes

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()

    def to_dict(self) -> dict[str, object]:
        return {"offset": self.offset, "digest": self.hexdigest}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DigestEvent":
        return cls(offset=int(payload["offset"]), digest=bytes.fromhex(str(payload["digest"])))


@dataclass
class DigestRecorder:
    """Digest callback that keeps every event in emission order."""

    events: list[DigestEvent] = field(default_factory=list)

    def __call__(self, offset: int, digest: bytes) -> None:
        self.events.append(DigestEvent(offset, bytes(digest)))

    def __len__(self) -> int:
        return len(self.events)

    def as_mapping(self) -> dict[int, bytes]:
        return {event.offset: event.digest for event in self.events}


class DigestVerifier:
    """Digest callback that checks each chunk against expected digests.

    Raises :class:`DigestMismatchError` for a differing digest or for an offset
    with no expectation.
    """

    def __init__(self, expected: Union[Mapping[int, bytes], Iterable[DigestEvent]]) -> None:
        if isinstance(expected, Mapping):
            self._expected = {int(offset): bytes(digest) for offset, digest in expected.items()}
        else:
            self._expected = {event.offset: event.digest for event in expected}
        self._seen: set[int] = set()

    def __call__(self, offset: int, digest: bytes) -> None:
        wanted = self._expected.get(offset)
        if wanted is None:
            raise DigestMismatchError(offset, f"unexpected chunk boundary at offset {offset}")
        if wanted != digest:
            raise DigestMismatchError(offset)
        self._seen.add(offset)

    @property
    def verified(self) -> int:
        """Number of chunks that matched so far."""
        return len(self._seen)

    def missing(self) -> list[int]:
        """Expected offsets that have not been verified."""
        return sorted(set(self._expected) - self._seen)


def fan_out(*callbacks: Callable[[int, bytes], Any]) -> Callable[[int, bytes], None]:
    """Combine callbacks; each is invoked in order and the first failure propagates."""

    def _dispatch(offset: int, digest: bytes) -> None:
        for callback in callbacks:
            callback(offset, digest)

    return _dispatch


__all__ = ["DigestEvent", "DigestRecorder", "DigestVerifier", "fan_out"]

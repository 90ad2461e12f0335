"""Digest manifests: JSON records of a stream's chunk digests."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chunkhash.digests import DigestEvent
from chunkhash.errors import ManifestError


class ManifestChunk(BaseModel):
    """Single chunk entry (`digest` is lowercase hex)."""

    offset: int = Field(ge=1)
    digest: str


class DigestManifest(BaseModel):
    """Chunk digests of one stream plus the policy that produced them."""

    model_config = ConfigDict(extra="allow")

    algorithm: str
    boundary: Optional[int] = Field(default=None, gt=0)
    total_bytes: int = Field(default=0, ge=0)
    chunks: List[ManifestChunk] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_offsets(self) -> "DigestManifest":
        """Chunk offsets must strictly increase and end at the total length."""

        previous = 0
        for chunk in self.chunks:
            if chunk.offset <= previous:
                raise ValueError(f"chunk offsets must strictly increase (got {chunk.offset} after {previous}).")
            previous = chunk.offset
        if self.chunks and previous != self.total_bytes:
            raise ValueError(f"last chunk offset {previous} does not match total_bytes {self.total_bytes}.")
        return self

    def events(self) -> list[DigestEvent]:
        return [DigestEvent.from_dict(chunk.model_dump()) for chunk in self.chunks]

    def expected(self) -> dict[int, bytes]:
        """Mapping of offset to digest, suitable for :class:`DigestVerifier`."""
        return {event.offset: event.digest for event in self.events()}


def build_manifest(events: Iterable[DigestEvent], *, algorithm: str, boundary: int | None = None) -> DigestManifest:
    chunks = [ManifestChunk(offset=event.offset, digest=event.hexdigest) for event in events]
    total = chunks[-1].offset if chunks else 0
    return DigestManifest(algorithm=algorithm, boundary=boundary, total_bytes=total, chunks=chunks)


def write_manifest(
    events: Iterable[DigestEvent], dest: Path, *, algorithm: str, boundary: int | None = None
) -> Path:
    """Write the digest manifest for `events` to `dest` as JSON."""

    manifest = build_manifest(events, algorithm=algorithm, boundary=boundary)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(json.dumps(manifest.model_dump(), indent=2), encoding="utf-8")
    return dest


def read_manifest(path: Path) -> DigestManifest:
    """Load and validate a digest manifest."""

    if not path.exists():
        raise ManifestError(f"Manifest {path} does not exist.")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        manifest = DigestManifest.model_validate(payload)
        manifest.events()
    except (json.JSONDecodeError, ValidationError, ValueError) as exc:
        raise ManifestError(f"Invalid manifest {path}: {exc}") from exc
    return manifest


__all__ = ["DigestManifest", "ManifestChunk", "build_manifest", "read_manifest", "write_manifest"]

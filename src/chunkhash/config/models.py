"""Pydantic models describing chunkhash configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chunkhash.hashing import available_algorithms


class HashingConfig(BaseModel):
    """Hash algorithm applied to every chunk."""

    model_config = ConfigDict(extra="allow")

    algorithm: str = "sha256"

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in available_algorithms() or name.startswith("shake_"):
            raise ValueError(f"unsupported hash algorithm {value!r}")
        return name


class BoundaryConfig(BaseModel):
    """Fixed-size boundary policy."""

    model_config = ConfigDict(extra="allow")

    every: int = Field(default=1024 * 1024, gt=0)


class IOConfig(BaseModel):
    """Read sizes and network timeouts used when pumping sources."""

    model_config = ConfigDict(extra="allow")

    read_size: int = Field(default=64 * 1024, gt=0)
    timeout_seconds: float = Field(default=30, gt=0)


class RuntimeConfig(BaseModel):
    """Execution-time settings."""

    model_config = ConfigDict(extra="allow")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_path: Optional[Path] = None


class ChunkhashConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    hashing: HashingConfig = Field(default_factory=HashingConfig)
    boundaries: BoundaryConfig = Field(default_factory=BoundaryConfig)
    io: IOConfig = Field(default_factory=IOConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


__all__ = [
    "BoundaryConfig",
    "ChunkhashConfig",
    "HashingConfig",
    "IOConfig",
    "RuntimeConfig",
]

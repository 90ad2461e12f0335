"""Configuration models and loaders for chunkhash."""

from .loader import ENV_OVERRIDES, ConfigError, dump_example_config, load_config
from .models import (
    BoundaryConfig,
    ChunkhashConfig,
    HashingConfig,
    IOConfig,
    RuntimeConfig,
)

__all__ = [
    "BoundaryConfig",
    "ChunkhashConfig",
    "ConfigError",
    "ENV_OVERRIDES",
    "HashingConfig",
    "IOConfig",
    "RuntimeConfig",
    "dump_example_config",
    "load_config",
]

"""Stepflow configuration."""

from .loader import ConfigLoader, load_config, resolve_env_vars
from .models import EngineConfig, RetryPolicy

__all__ = [
    "EngineConfig",
    "RetryPolicy",
    "ConfigLoader",
    "load_config",
    "resolve_env_vars",
]

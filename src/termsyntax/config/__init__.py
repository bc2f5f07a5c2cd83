"""Configuration loading and storage."""

from .loader import env_terms, load_config_file, load_domain, load_env, parse_config
from .store import ConfigStore, MemoryConfigStore, default_store

__all__ = [
    "ConfigStore",
    "MemoryConfigStore",
    "default_store",
    "parse_config",
    "env_terms",
    "load_env",
    "load_domain",
    "load_config_file",
]

from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, ResolverConfig

__all__ = ["AppConfig", "EnvOverrides", "ResolverConfig", "load_config"]

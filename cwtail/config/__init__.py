"""Configuration for cwtail."""

from .config import Config
from .schema import CwTailConfig

__all__ = [
    "Config",
    "CwTailConfig",
]

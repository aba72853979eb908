"""Ambient services shared by the client library — structured logging.

This package is framework-agnostic. It must NEVER import from ``wolfgram/``.
"""

from core.logger import WolfgramLogger

__all__ = [
    "WolfgramLogger",
]

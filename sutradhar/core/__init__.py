"""Core utilities shared by every layer.

This package is framework-agnostic. It must NEVER import from ``bot/`` or ``sdk/``.
"""

from sutradhar.core.logger import SutradharLogger

__all__ = [
    "SutradharLogger",
]

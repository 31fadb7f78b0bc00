"""
Container engine adapters.
"""

from .compose import ComposeEngine

__all__ = [
    "ComposeEngine",
]

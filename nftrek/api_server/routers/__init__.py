"""
Router package initialization.
"""

from . import gallery, mint, system

__all__ = [
    "gallery",
    "mint",
    "system",
]

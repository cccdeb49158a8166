"""
Repository facades returning entities instead of ORM records.
"""

from .base import BaseRepository

__all__ = ["BaseRepository"]

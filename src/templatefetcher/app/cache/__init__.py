"""Template cache folders."""

from .service import CacheManager

__all__ = ["CacheManager"]

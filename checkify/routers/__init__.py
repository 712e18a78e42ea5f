"""API routers."""

from checkify.routers import collections, health, tiers

__all__ = [
    "collections",
    "health",
    "tiers",
]

"""FastAPI dependencies."""

from .tiers import get_caller_tier

__all__ = ["get_caller_tier"]

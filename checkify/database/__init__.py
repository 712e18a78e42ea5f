from .base import Base, JSONVariant
from .engine import engine, get_engine
from .session import SessionLocal, get_db, get_session_factory

__all__ = [
    "Base",
    "JSONVariant",
    "engine",
    "get_engine",
    "SessionLocal",
    "get_db",
    "get_session_factory",
]

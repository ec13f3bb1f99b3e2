"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import SessionLog

__all__ = ["get_session", "init_db", "configure_engine", "SessionLog"]

"""SQLAlchemy ORM models for FocusFlow."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SessionLog(Base):
    """One completed focus or break phase."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phase = Column(String(10), nullable=False)  # focus | break
    duration_minutes = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    def __repr__(self) -> str:
        return (
            f"<SessionLog id={self.id} phase={self.phase} "
            f"minutes={self.duration_minutes} at={self.completed_at}>"
        )

"""SQLAlchemy ORM models for Tempus Ring."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SessionRecord(Base):
    """One finished timer session (work or break), completed or abandoned."""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)        # TimerSession.id
    date = Column(Date, nullable=False, index=True)  # local date of start_time
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    session_type = Column(String(20), nullable=False)  # work | short_break | long_break
    completed = Column(Boolean, nullable=False, default=False)
    duration_seconds = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<SessionRecord id={self.id} type={self.session_type} "
            f"completed={self.completed}>"
        )

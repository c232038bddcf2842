import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppendOnlyModel(Base):
    """Rows that are written once and never updated (log tables)."""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)


class BaseModel(AppendOnlyModel):
    __abstract__ = True

    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

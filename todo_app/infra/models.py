from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, LargeBinary, String

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueModel(Base):
    __tablename__ = "kv_store"

    key = Column(String(200), primary_key=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

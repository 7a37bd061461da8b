from __future__ import annotations

from sqlalchemy.orm import sessionmaker

from .models import KeyValueModel


class KeyValueStore:
    """Byte blobs keyed by string, one row per key."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> bytes | None:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            return bytes(row.value) if row else None

    def put(self, key: str, value: bytes) -> None:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            if row:
                row.value = value
            else:
                session.add(KeyValueModel(key=key, value=value))
            session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            if not row:
                return
            session.delete(row)
            session.commit()

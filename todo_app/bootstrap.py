"""Wires settings into a ready-to-use task service."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from todo_app.config import SETTINGS, Settings
from todo_app.infra.db import create_db_engine, create_session_factory, init_db
from todo_app.infra.kv_store import KeyValueStore
from todo_app.infra.storage import StorageError, TaskStorage
from todo_app.services.task_service import TaskService

logger = logging.getLogger(__name__)


def build_service(settings: Settings = SETTINGS) -> TaskService:
    """Open the database and load the stored tasks.

    Raises ``StorageError`` when the database (or the directory it lives in)
    cannot be opened.
    """
    try:
        engine = create_db_engine(settings.database_url)
        init_db(engine)
    except (SQLAlchemyError, OSError) as exc:
        raise StorageError(f"Cannot open database: {exc}") from exc

    storage = TaskStorage(KeyValueStore(create_session_factory(engine)))
    service = TaskService(storage)
    logger.info("Loaded %d tasks", len(service.tasks))
    return service

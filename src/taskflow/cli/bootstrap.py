# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- builds the record store client and injects it into the repositories,
- wires repositories + notifier into the list engine.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.notifier import LoggingNotifier
from ..core.ports import Notifier, RecordStore
from ..core.state import AppState
from ..store.client import RecordStoreClient
from ..store.memory import demo_store
from ..tasks.engine import DEFAULT_CATEGORY_ID, ListEngine
from ..tasks.repositories import CategoryRepository, TaskRepository

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def build_store(settings) -> RecordStore:
    """
    Offline mode -> seeded in-memory store.
    Otherwise -> HTTP client; raises ConfigurationError when credentials are missing.
    """
    if getattr(settings, "offline", False):
        logger.info("Offline demo mode: using in-memory record store.")
        return demo_store(task_table=settings.task_table, category_table=settings.category_table)
    return RecordStoreClient.from_settings(settings)


def create_initial_state(*, settings=None, store: RecordStore | None = None, notifier: Notifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and store injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if store is None:
        store = build_store(settings)
    if notifier is None:
        notifier = LoggingNotifier()

    default_category = getattr(settings, "default_category", None) or DEFAULT_CATEGORY_ID

    tasks_repo = TaskRepository(
        store,
        table=settings.task_table,
        notifier=notifier,
        default_category=default_category,
    )
    categories_repo = CategoryRepository(store, table=settings.category_table, notifier=notifier)

    engine = ListEngine(
        tasks_repo,
        categories_repo,
        notifier=notifier,
        default_category=default_category,
    )

    return AppState(settings=settings, store=store, engine=engine, notifier=notifier)

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.cli.bootstrap import create_initial_state
from taskflow.core.state import AppState
from taskflow.tasks.engine import ListEngine
from taskflow.tasks.repositories import CategoryRepository, TaskRepository

from .fakes import FakeRecordStore, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="TaskFlow",
        data_dir=tmp_path / "data",
        task_table="task",
        category_table="category",
        default_category=None,
        offline=False,
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def store() -> FakeRecordStore:
    return FakeRecordStore(
        {
            "category": [
                {"Id": "design", "Name": "Design", "color": "bg-purple-500"},
                {"Id": "development", "Name": "Development", "color": "bg-blue-500"},
            ],
        }
    )


@pytest.fixture()
def task_repo(store: FakeRecordStore, notifier: RecordingNotifier) -> TaskRepository:
    return TaskRepository(store, table="task", notifier=notifier)


@pytest.fixture()
def category_repo(store: FakeRecordStore, notifier: RecordingNotifier) -> CategoryRepository:
    return CategoryRepository(store, table="category", notifier=notifier)


@pytest.fixture()
def engine(
    task_repo: TaskRepository,
    category_repo: CategoryRepository,
    notifier: RecordingNotifier,
) -> ListEngine:
    return ListEngine(task_repo, category_repo, notifier=notifier)


@pytest.fixture()
def state(settings: SimpleNamespace, store: FakeRecordStore, notifier: RecordingNotifier) -> AppState:
    """AppState wired through the real composition root, backed by the fake store."""
    return create_initial_state(settings=settings, store=store, notifier=notifier)

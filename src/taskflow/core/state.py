# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.engine import ListEngine
from .ports import Notifier, RecordStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: RecordStore
    engine: ListEngine
    notifier: Notifier

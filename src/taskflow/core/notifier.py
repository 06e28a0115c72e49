# src/taskflow/core/notifier.py

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Default Notifier: user-visible notices go to the log only."""

    def success(self, text: str) -> None:
        logger.info("%s", text)

    def error(self, text: str) -> None:
        logger.warning("%s", text)

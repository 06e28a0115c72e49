# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL on an
asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..core.errors import ConfigurationError
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    try:
        await run_console_loop(state)
    finally:
        try:
            await state.store.aclose()
        except Exception:
            logger.debug("Record store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskflow")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "TaskFlow"))

    try:
        state = create_initial_state(settings=settings, notifier=ConsoleNotifier())
    except ConfigurationError as e:
        logger.error("%s", e)
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Or set TASKFLOW_OFFLINE=1 to try the in-memory demo store.", file=sys.stderr)
        raise SystemExit(2) from None

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")

    logger.info("Bye.")


if __name__ == "__main__":
    main()

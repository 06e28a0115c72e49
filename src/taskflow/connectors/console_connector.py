# src/taskflow/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Notifier that prints timestamped notices to stdout."""

    def success(self, text: str) -> None:
        _print_ts(f"OK  {text}")

    def error(self, text: str) -> None:
        _print_ts(f"ERR {text}")


async def _ask(prompt: str) -> str:
    # input() blocks; keep the event loop free while the user types.
    return await asyncio.to_thread(input, prompt)


async def confirm_delete(task: Task) -> bool:
    try:
        answer = await _ask(f"Delete task #{task.id} '{task.title}'? [y/N] ")
    except (EOFError, KeyboardInterrupt):
        return False
    return answer.strip().lower() in ("y", "yes")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "TaskFlow"))

    await state.engine.load()
    _print_ts(f"[{app_name}] {len(state.engine.tasks)} tasks loaded. Use /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = (await _ask(f"{app_name.lower()}> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, user_input, emit=_print_ts, confirm=confirm_delete)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them, or /add <title> to create a task."

        print(reply, flush=True)

    logger.info("Console connector finished.")

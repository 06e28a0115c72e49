# src/taskflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, timedelta
from typing import cast

from ..core.errors import TaskFlowError, ValidationError
from ..core.ports import RecordId
from ..core.state import AppState
from ..tasks.engine import is_overdue
from ..tasks.task_models import ALL_CATEGORY_ID, Category, Priority, Task, TaskDraft

CommandEmitter = Callable[[str], None]
ConfirmPrompt = Callable[[Task], Awaitable[bool]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler4 = Callable[
    [AppState, list[str], CommandEmitter | None, ConfirmPrompt | None], Awaitable[str]
]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
        confirm: ConfirmPrompt | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return await h4(state, args, emit, confirm)
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)
        except TaskFlowError as e:
            logger.info("Command /%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----

def format_due_date(due: datetime, *, today: date | None = None) -> str:
    if today is None:
        today = datetime.now(UTC).date()
    d = due.date()
    if d == today:
        return "Today"
    if d == today + timedelta(days=1):
        return "Tomorrow"
    if d == today - timedelta(days=1):
        return "Yesterday"
    return f"{d:%b} {d.day}, {d.year}"


def format_task(task: Task, categories: dict[str, str], *, now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now(UTC)
    mark = "[x]" if task.completed else "[ ]"
    cat = categories.get(task.category_id, task.category_id)
    due = format_due_date(task.due_date, today=now.date())
    flag = " OVERDUE" if is_overdue(task, now) else ""
    line = f"{mark} #{task.id} {task.title}  ({task.priority}, {cat}, due {due}{flag})"
    if task.tags:
        line += "  " + " ".join(f"#{t}" for t in task.tags)
    return line


def _category_names(categories: list[Category]) -> dict[str, str]:
    return {c.id: c.name for c in categories}


# ---- argument helpers ----

_OPTIONS = {"--desc", "--due", "--priority", "--cat", "--tag", "--title"}


def parse_options(args: list[str]) -> tuple[list[str], dict[str, str], list[str]]:
    """
    Split args into (positional, options, tags).

    Options take one value each; --tag may repeat.
    """
    positional: list[str] = []
    opts: dict[str, str] = {}
    tags: list[str] = []
    i = 0
    while i < len(args):
        a = args[i]
        if a.startswith("--"):
            if a not in _OPTIONS:
                raise ValidationError(f"Unknown option {a} (use {', '.join(sorted(_OPTIONS))})")
            if i + 1 >= len(args):
                raise ValidationError(f"Option {a} needs a value")
            value = args[i + 1]
            if a == "--tag":
                tags.append(value)
            else:
                opts[a[2:]] = value
            i += 2
            continue
        positional.append(a)
        i += 1
    return positional, opts, tags


def parse_task_id(raw: str) -> RecordId:
    raw = raw.strip().lstrip("#")
    return int(raw) if raw.isdigit() else raw


def _resolve_category(state: AppState, raw: str) -> str:
    needle = raw.strip().lower()
    for c in state.engine.categories:
        if c.id.lower() == needle or c.name.lower() == needle:
            return c.id
    raise ValidationError(f"Unknown category: {raw}")


def apply_to_draft(state: AppState, draft: TaskDraft, args: list[str]) -> TaskDraft:
    positional, opts, tags = parse_options(args)

    title = opts.get("title") or " ".join(positional)
    if title:
        draft.title = title
    if "desc" in opts:
        draft.description = opts["desc"]
    if "due" in opts:
        try:
            draft.due_date = date.fromisoformat(opts["due"])
        except ValueError:
            raise ValidationError(f"Bad due date {opts['due']!r}, expected YYYY-MM-DD") from None
    if "priority" in opts:
        try:
            draft.priority = Priority(opts["priority"].strip().lower())
        except ValueError:
            raise ValidationError("Priority must be low, medium or high") from None
    if "cat" in opts:
        cat = _resolve_category(state, opts["cat"])
        if cat == ALL_CATEGORY_ID:
            raise ValidationError("Tasks cannot be filed under All Tasks")
        draft.category_id = cat
    for t in tags:
        draft.add_tag(t)
    return draft


def _busy(state: AppState) -> str | None:
    if state.engine.submitting:
        return "Another change is still being saved, try again in a moment."
    return None


# ---- handlers ----

async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    engine = state.engine
    now = datetime.now(UTC)
    view = engine.view()
    st = engine.stats(now=now)
    f = engine.filters

    header = (
        f"Tasks: {st.total} total, {st.completed} done, {st.pending} pending, {st.overdue} overdue"
        f" | category={f.active_category} sort={f.sort_key}"
    )
    if f.search_query:
        header += f" search={f.search_query!r}"

    if not view:
        return header + "\n  (no tasks match)"

    names = _category_names(engine.categories)
    return "\n".join([header, *(f"  {format_task(t, names, now=now)}" for t in view)])


async def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    st = state.engine.stats()
    return (
        "Stats:\n"
        f"  Total: {st.total}\n"
        f"  Completed: {st.completed}\n"
        f"  Pending: {st.pending}\n"
        f"  Overdue: {st.overdue}"
    )


async def cmd_cats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    active = state.engine.filters.active_category
    lines = ["Categories:"]
    for c in state.engine.categories_with_counts():
        marker = "*" if c.id == active else " "
        lines.append(f" {marker} {c.id:<12} {c.name} ({c.task_count})")
    return "\n".join(lines)


async def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /filter            -> back to All Tasks
    /filter <category> -> only tasks in that category (id or name)
    """
    if not args:
        state.engine.set_category(ALL_CATEGORY_ID)
        return "Showing all tasks."
    cat = _resolve_category(state, " ".join(args))
    state.engine.set_category(cat)
    return f"Filtering by category: {cat}"


async def cmd_search(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    query = " ".join(args)
    state.engine.set_search(query)
    if not query:
        return "Search cleared."
    return f"Searching for {query!r} ({len(state.engine.view())} matches)."


async def cmd_sort(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Sorted by {state.engine.filters.sort_key}. Use /sort dueDate | priority | completed."
    state.engine.set_sort(args[0])
    return f"Sorted by {state.engine.filters.sort_key}."


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> [--desc ..] [--due YYYY-MM-DD] [--priority ..] [--cat ..] [--tag ..]

    Tags collected earlier with /tag are kept. The options are applied to a
    copy, so a rejected /add leaves the pending draft as it was.
    """
    busy = _busy(state)
    if busy:
        return busy
    engine = state.engine
    if engine.editing_id is not None:
        engine.begin_create()
    draft = apply_to_draft(state, engine.draft.copy(), args)
    created = await engine.create(draft)
    if created is None:
        return "Task was not created."
    engine.begin_create()
    return f"Created #{created.id}: {created.title}"


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/edit <id> [new title] [--desc ..] [--due ..] [--priority ..] [--cat ..] [--tag ..]"""
    busy = _busy(state)
    if busy:
        return busy
    if not args:
        return "Usage: /edit <id> [title] [--desc ..] [--due YYYY-MM-DD] [--priority ..] [--cat ..] [--tag ..]"
    engine = state.engine
    task_id = parse_task_id(args[0])
    draft = apply_to_draft(state, engine.draft_for(task_id), args[1:])
    updated = await engine.update(task_id, draft)
    if updated is None:
        return f"Task #{task_id} was not updated."
    return f"Updated #{task_id}: {updated.title}"


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    busy = _busy(state)
    if busy:
        return busy
    if not args:
        return "Usage: /done <id>"
    task_id = parse_task_id(args[0])
    updated = await state.engine.toggle_complete(task_id)
    if updated is None:
        return f"Task #{task_id} was not changed."
    return f"#{task_id} is now {'done' if updated.completed else 'open'}."


async def cmd_rm(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
    confirm: ConfirmPrompt | None = None,
) -> str:
    busy = _busy(state)
    if busy:
        return busy
    if not args:
        return "Usage: /rm <id>"
    task_id = parse_task_id(args[0])

    async def _deny(_task: Task) -> bool:
        return False

    ok = await state.engine.delete(task_id, confirm=confirm or _deny)
    return f"Deleted #{task_id}." if ok else f"Task #{task_id} was not deleted."


async def cmd_tag(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/tag <text> -> add a tag to the task being written (used by the next /add)."""
    added = state.engine.add_tag(" ".join(args))
    tags = ", ".join(state.engine.draft.tags) or "(none)"
    return f"Draft tags: {tags}" if added else f"Tag not added. Draft tags: {tags}"


async def cmd_untag(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    removed = state.engine.remove_tag(" ".join(args))
    tags = ", ".join(state.engine.draft.tags) or "(none)"
    return f"Draft tags: {tags}" if removed else f"No such tag. Draft tags: {tags}"


async def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Reloading...")
    await state.engine.load()
    return f"Loaded {len(state.engine.tasks)} tasks, {len(state.engine.categories)} categories."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the filtered, sorted task list.", aliases=["ls"])
registry.register("stats", cmd_stats, help_text="Show total / completed / pending / overdue counts.")
registry.register("cats", cmd_cats, help_text="Show categories with task counts.", aliases=["categories"])
registry.register("filter", cmd_filter, help_text="Filter by category: /filter design | /filter (all).")
registry.register("search", cmd_search, help_text="Search title and description: /search text | /search (clear).")
registry.register("sort", cmd_sort, help_text="Sort: /sort dueDate | priority | completed.")
registry.register(
    "add", cmd_add, help_text="Create a task: /add <title> [--desc --due --priority --cat --tag].", aliases=["new"]
)
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [title] [options].")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task (asks first): /rm <id>.", aliases=["delete"])
registry.register("tag", cmd_tag, help_text="Add a tag to the draft: /tag <text>.")
registry.register("untag", cmd_untag, help_text="Remove a tag from the draft: /untag <text>.")
registry.register("reload", cmd_reload, help_text="Reload tasks and categories from the store.")

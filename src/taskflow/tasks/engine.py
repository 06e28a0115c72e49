# src/taskflow/tasks/engine.py

from __future__ import annotations

"""
List engine.

Holds the in-memory task/category collections and the filter state, derives
the displayed view and statistics, and runs mutations against the
repositories.

Consistency model:
- no optimistic local edits: every successful mutation is followed by load()
- a failed mutation leaves local state untouched
- ValidationError / NotFoundError are raised before any network call

Overlapping load() calls are ordered by a load sequence number: a result is
applied only if no later-started load has applied its result already.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import UTC, date, datetime

from ..core.errors import NotFoundError, ValidationError
from ..core.notifier import LoggingNotifier
from ..core.ports import CategoryRepo, Notifier, RecordId, TaskRepo
from .mapper import task_to_fields
from .task_models import (
    ALL_CATEGORY_ID,
    Category,
    FilterState,
    Priority,
    SortKey,
    Stats,
    Task,
    TaskDraft,
    TaskFields,
    all_tasks_category,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "development"

ConfirmCallback = Callable[[Task], bool | Awaitable[bool]]


# ---- pure derivations ----

def _matches(task: Task, category_id: str, needle: str) -> bool:
    if category_id != ALL_CATEGORY_ID and task.category_id != category_id:
        return False
    if not needle:
        return True
    return needle in task.title.lower() or needle in task.description.lower()


def derive_view(tasks: Sequence[Task], filters: FilterState) -> list[Task]:
    """
    Filter by category and search text, then sort.

    Sorting is stable, so ties keep their input order. The input is not
    mutated; a new list is returned.
    """
    needle = (filters.search_query or "").lower()
    view = [t for t in tasks if _matches(t, filters.active_category, needle)]

    if filters.sort_key == SortKey.DUE_DATE:
        return sorted(view, key=lambda t: t.due_date)
    if filters.sort_key == SortKey.PRIORITY:
        return sorted(view, key=lambda t: -t.priority.rank)
    if filters.sort_key == SortKey.COMPLETED:
        return sorted(view, key=lambda t: t.completed)
    return view


def is_overdue(task: Task, now: datetime) -> bool:
    return not task.completed and task.due_date < now


def derive_stats(tasks: Iterable[Task], *, now: datetime | None = None) -> Stats:
    if now is None:
        now = datetime.now(UTC)
    total = completed = overdue = 0
    for t in tasks:
        total += 1
        if t.completed:
            completed += 1
        elif is_overdue(t, now):
            overdue += 1
    return Stats(total=total, completed=completed, pending=total - completed, overdue=overdue)


def count_by_category(tasks: Iterable[Task], categories: Sequence[Category]) -> list[Category]:
    """Copies of `categories` with task_count filled in ("all" counts everything)."""
    tasks = list(tasks)
    counts: dict[str, int] = {}
    for t in tasks:
        counts[t.category_id] = counts.get(t.category_id, 0) + 1
    out = []
    for c in categories:
        n = len(tasks) if c.id == ALL_CATEGORY_ID else counts.get(c.id, 0)
        out.append(Category(id=c.id, name=c.name, color=c.color, task_count=n))
    return out


def _ensure_all_first(categories: list[Category]) -> list[Category]:
    rest = [c for c in categories if c.id != ALL_CATEGORY_ID]
    return [all_tasks_category(), *rest]


# ---- engine ----

class ListEngine:
    def __init__(
        self,
        tasks_repo: TaskRepo,
        categories_repo: CategoryRepo,
        *,
        notifier: Notifier | None = None,
        default_category: str = DEFAULT_CATEGORY_ID,
    ) -> None:
        self._tasks_repo = tasks_repo
        self._categories_repo = categories_repo
        self._notifier: Notifier = notifier or LoggingNotifier()
        self.default_category = default_category

        self.tasks: list[Task] = []
        self.categories: list[Category] = _ensure_all_first(categories_repo.builtin_categories())
        self.filters = FilterState()

        self.submitting = False
        self.draft = self._blank_draft()
        self.editing_id: RecordId | None = None

        self._load_seq = 0
        self._applied_seq = 0

    # ---- loading ----

    async def load(self) -> None:
        """
        Fetch tasks and categories concurrently.

        Each side fails on its own: no tasks -> empty list, no categories ->
        built-in set. Safe to call repeatedly.
        """
        self._load_seq += 1
        seq = self._load_seq

        tasks_res, cats_res = await asyncio.gather(
            self._tasks_repo.fetch_all(),
            self._categories_repo.fetch_all(),
            return_exceptions=True,
        )

        if seq < self._applied_seq:
            logger.debug("Dropping stale load result seq=%s applied=%s", seq, self._applied_seq)
            return
        self._applied_seq = seq

        if isinstance(tasks_res, BaseException):
            logger.error("Task load failed", exc_info=tasks_res)
            self._notifier.error("Failed to load tasks")
            self.tasks = []
        else:
            self.tasks = list(tasks_res)

        if isinstance(cats_res, BaseException):
            logger.error("Category load failed", exc_info=cats_res)
            self._notifier.error("Failed to load categories, using defaults")
            self.categories = _ensure_all_first(self._categories_repo.builtin_categories())
        else:
            cats = list(cats_res) or self._categories_repo.builtin_categories()
            self.categories = _ensure_all_first(cats)

        logger.debug("Loaded tasks=%d categories=%d seq=%s", len(self.tasks), len(self.categories), seq)

    # ---- derived state ----

    def view(self) -> list[Task]:
        return derive_view(self.tasks, self.filters)

    def stats(self, *, now: datetime | None = None) -> Stats:
        return derive_stats(self.tasks, now=now)

    def categories_with_counts(self) -> list[Category]:
        return count_by_category(self.tasks, self.categories)

    def find(self, task_id: RecordId) -> Task | None:
        """Look up a loaded task; "12" and 12 name the same task."""
        key = str(task_id)
        for t in self.tasks:
            if str(t.id) == key:
                return t
        return None

    def _require(self, task_id: RecordId) -> Task:
        task = self.find(task_id)
        if task is None:
            raise NotFoundError(f"No task with id {task_id!r}")
        return task

    # ---- filter state ----

    def set_category(self, category_id: str) -> None:
        self.filters.active_category = category_id or ALL_CATEGORY_ID

    def set_search(self, query: str) -> None:
        self.filters.search_query = query or ""

    def set_sort(self, sort_key: SortKey | str) -> None:
        self.filters.sort_key = sort_key if isinstance(sort_key, SortKey) else SortKey.parse(sort_key)

    # ---- draft ----

    def _blank_draft(self) -> TaskDraft:
        return TaskDraft(due_date=datetime.now(UTC).date(), category_id=self.default_category)

    def begin_create(self) -> TaskDraft:
        self.editing_id = None
        self.draft = self._blank_draft()
        return self.draft

    def draft_for(self, task_id: RecordId) -> TaskDraft:
        """A detached draft of a loaded task; the engine's own draft is left alone."""
        return TaskDraft.from_task(self._require(task_id))

    def begin_edit(self, task_id: RecordId) -> TaskDraft:
        task = self._require(task_id)
        self.editing_id = task.id
        self.draft = TaskDraft.from_task(task)
        return self.draft

    def add_tag(self, tag: str) -> bool:
        return self.draft.add_tag(tag)

    def remove_tag(self, tag: str) -> bool:
        return self.draft.remove_tag(tag)

    # ---- mutations ----

    def _fields_from_draft(self, draft: TaskDraft, *, completed: bool, today: date) -> TaskFields:
        if not draft.title or not draft.title.strip():
            raise ValidationError("Task title is required")
        priority = draft.priority if isinstance(draft.priority, Priority) else Priority.from_remote(draft.priority)
        return TaskFields(
            title=draft.title.strip(),
            description=draft.description or "",
            completed=completed,
            due_date=draft.due_date or today,
            priority=priority,
            category_id=draft.category_id or self.default_category,
            tags=tuple(t.strip() for t in draft.tags if t and t.strip()),
        ).validate()

    async def _submit(self, call: Awaitable[Task | None]) -> Task | None:
        self.submitting = True
        try:
            result = await call
            if result is not None:
                await self.load()
            return result
        finally:
            self.submitting = False

    async def create(self, draft: TaskDraft) -> Task | None:
        """Create a task from the draft. Returns the written task, or None on a remote failure."""
        fields = self._fields_from_draft(draft, completed=False, today=datetime.now(UTC).date())
        created = await self._submit(self._tasks_repo.create(fields))
        if created is not None:
            logger.info("Task created id=%s", created.id)
        return created

    async def update(self, task_id: RecordId, draft: TaskDraft) -> Task | None:
        task = self._require(task_id)
        fields = self._fields_from_draft(draft, completed=task.completed, today=task.created_at.date())
        updated = await self._submit(self._tasks_repo.update(task.id, fields))
        if updated is not None:
            logger.info("Task updated id=%s", task.id)
        return updated

    async def save_draft(self) -> Task | None:
        """Submit the current draft: update when editing, create otherwise."""
        if self.editing_id is not None:
            result = await self.update(self.editing_id, self.draft)
        else:
            result = await self.create(self.draft)
        if result is not None:
            self.begin_create()
        return result

    async def toggle_complete(self, task_id: RecordId) -> Task | None:
        task = self._require(task_id)
        fields = task_to_fields(task, completed=not task.completed)
        updated = await self._submit(self._tasks_repo.update(task.id, fields, require_title=False))
        if updated is not None:
            self._notifier.success("Task completed!" if fields.completed else "Task marked as incomplete")
        return updated

    async def delete(self, task_id: RecordId, *, confirm: ConfirmCallback) -> bool:
        """
        Delete a task after `confirm(task)` agrees.

        Declining is not an error: returns False and nothing is sent.
        """
        task = self._require(task_id)

        answer = confirm(task)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.debug("Delete of task id=%s not confirmed", task.id)
            return False

        self.submitting = True
        try:
            ok = await self._tasks_repo.delete(task.id)
            if ok:
                await self.load()
            return ok
        finally:
            self.submitting = False

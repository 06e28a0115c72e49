# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import StrEnum

from ..core.errors import ValidationError
from ..core.ports import RecordId

ALL_CATEGORY_ID = "all"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_remote(cls, raw: object) -> Priority:
        if not isinstance(raw, str) or not raw.strip():
            return cls.MEDIUM
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class SortKey(StrEnum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str) -> SortKey:
        """Accept "dueDate", "due_date", "due-date" (any case)."""
        norm = raw.strip().replace("_", "").replace("-", "").lower()
        for key in cls:
            if key.value.lower() == norm:
                return key
        raise ValidationError(f"Unknown sort key: {raw!r} (use dueDate, priority or completed)")


@dataclass(slots=True)
class Task:
    id: RecordId
    title: str
    description: str
    completed: bool
    created_at: datetime
    due_date: datetime
    priority: Priority
    category_id: str
    tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str
    # Derived from the current task collection, never stored remotely.
    task_count: int = 0


BUILTIN_CATEGORIES: tuple[Category, ...] = (
    Category(id=ALL_CATEGORY_ID, name="All Tasks", color="bg-surface-500"),
    Category(id="design", name="Design", color="bg-purple-500"),
    Category(id="development", name="Development", color="bg-blue-500"),
    Category(id="management", name="Management", color="bg-green-500"),
    Category(id="marketing", name="Marketing", color="bg-pink-500"),
)


def all_tasks_category() -> Category:
    c = BUILTIN_CATEGORIES[0]
    return Category(id=c.id, name=c.name, color=c.color)


def builtin_categories() -> list[Category]:
    """Fresh copies of the built-in category set ("all" first)."""
    return [Category(id=c.id, name=c.name, color=c.color) for c in BUILTIN_CATEGORIES]


@dataclass(slots=True)
class FilterState:
    active_category: str = ALL_CATEGORY_ID
    search_query: str = ""
    sort_key: SortKey = SortKey.DUE_DATE


@dataclass(slots=True, frozen=True)
class Stats:
    total: int
    completed: int
    pending: int
    overdue: int


@dataclass(slots=True)
class TaskDraft:
    """
    In-progress create/edit form.

    Tag edits happen here and never touch the network.
    """

    title: str = ""
    description: str = ""
    due_date: date | None = None
    priority: Priority = Priority.MEDIUM
    category_id: str | None = None
    tags: list[str] = field(default_factory=list)

    def add_tag(self, tag: str) -> bool:
        tag = (tag or "").strip()
        if not tag or tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> bool:
        if tag not in self.tags:
            return False
        self.tags = [t for t in self.tags if t != tag]
        return True

    def copy(self) -> TaskDraft:
        return replace(self, tags=list(self.tags))

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(
            title=task.title,
            description=task.description,
            due_date=task.due_date.date(),
            priority=task.priority,
            category_id=task.category_id,
            tags=list(task.tags),
        )


@dataclass(slots=True, frozen=True)
class TaskFields:
    """
    Every writable task field with its default.

    Identity and audit fields are system-assigned and never part of a write.
    """

    title: str
    description: str = ""
    completed: bool = False
    due_date: date | None = None
    priority: Priority = Priority.MEDIUM
    category_id: str | None = None
    tags: tuple[str, ...] = ()

    def validate(self, *, require_title: bool = True) -> TaskFields:
        # Toggling re-sends stored fields as they are, blank title included.
        if require_title and (not self.title or not self.title.strip()):
            raise ValidationError("Task title is required")
        if not isinstance(self.priority, Priority):
            raise ValidationError(f"Unknown priority: {self.priority!r}")
        if any(not t.strip() for t in self.tags):
            raise ValidationError("Tags must not be empty")
        return self


@dataclass(slots=True, frozen=True)
class CategoryFields:
    name: str
    color: str = "bg-blue-500"
    tags: tuple[str, ...] = ()

    def validate(self) -> CategoryFields:
        if not self.name or not self.name.strip():
            raise ValidationError("Category name is required")
        return self

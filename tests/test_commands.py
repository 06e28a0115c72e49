# tests/test_commands.py

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from taskflow.cli.commands import CommandRegistry, format_due_date, parse_task_id, registry
from taskflow.core.state import AppState

from .fakes import FakeRecordStore


@pytest.mark.asyncio
async def test_command_registry_routes_3_and_4_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h3": 0, "h4": 0}

    async def h3(state, args, emit):
        called["h3"] += 1
        return "h3:" + ",".join(args)

    async def h4(state, args, emit, confirm):
        called["h4"] += 1
        if emit is not None:
            emit("note")
        return "h4" if confirm is not None else "h4-noconfirm"

    reg.register("a", h3, "a", aliases=["aa"])
    reg.register("b", h4, "b")

    async def yes(_task) -> bool:
        return True

    notes: list[str] = []
    assert await reg.handle(state, "/a x 'y z'") == "h3:x,y z"
    assert await reg.handle(state, "/AA") == "h3:"
    assert await reg.handle(state, "/b", emit=notes.append, confirm=yes) == "h4"
    assert called == {"h3": 2, "h4": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_non_commands_and_unknown_commands(state: AppState) -> None:
    assert await registry.handle(state, "hello") is None
    reply = await registry.handle(state, "/nope")
    assert reply is not None and reply.startswith("Unknown command: /nope")
    assert "Empty command" in (await registry.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_help_lists_commands(state: AppState) -> None:
    reply = await registry.handle(state, "/help")
    assert reply is not None
    for name in ("/list", "/add", "/done", "/rm", "/sort"):
        assert name in reply


@pytest.mark.asyncio
async def test_add_list_done_flow(state: AppState, store: FakeRecordStore) -> None:
    await state.engine.load()

    reply = await registry.handle(
        state,
        '/add "Write release notes" --desc "for v1" --due 2026-01-05 --priority high --cat Design --tag docs',
    )
    assert reply is not None and reply.startswith("Created #")

    (row,) = store.rows("task")
    assert row["title"] == "Write release notes"
    assert row["description"] == "for v1"
    assert row["due_date"] == "2026-01-05"
    assert row["priority"] == "high"
    assert row["category"] == "design"
    assert row["Tags"] == "docs"
    task_id = row["Id"]

    listing = await registry.handle(state, "/list")
    assert listing is not None
    assert "Write release notes" in listing
    assert "OVERDUE" in listing
    assert "#docs" in listing

    reply = await registry.handle(state, f"/done #{task_id}")
    assert reply == f"#{task_id} is now done."
    assert store.rows("task")[0]["completed"] == "completed"

    stats = await registry.handle(state, "/stats")
    assert stats is not None and "Completed: 1" in stats


@pytest.mark.asyncio
async def test_rm_respects_confirmation(state: AppState, store: FakeRecordStore) -> None:
    row = store._insert("task", {"Name": "Temp", "title": "Temp", "completed": "", "Tags": ""})
    await state.engine.load()

    async def no(_task) -> bool:
        return False

    async def yes(_task) -> bool:
        return True

    reply = await registry.handle(state, f"/rm {row['Id']}", confirm=no)
    assert reply == f"Task #{row['Id']} was not deleted."
    assert "delete" not in store.ops()

    reply = await registry.handle(state, f"/rm {row['Id']}")
    assert reply == f"Task #{row['Id']} was not deleted."

    reply = await registry.handle(state, f"/rm {row['Id']}", confirm=yes)
    assert reply == f"Deleted #{row['Id']}."
    assert store.rows("task") == []


@pytest.mark.asyncio
async def test_errors_are_reported_not_raised(state: AppState, store: FakeRecordStore) -> None:
    await state.engine.load()

    reply = await registry.handle(state, "/edit 404 New title")
    assert reply is not None and reply.startswith("Error:")

    reply = await registry.handle(state, '/add "   "')
    assert reply is not None and reply.startswith("Error:")
    assert "create" not in store.ops()

    reply = await registry.handle(state, "/add x --due tomorrow")
    assert reply is not None and reply.startswith("Error:")

    reply = await registry.handle(state, "/add x --colour red")
    assert reply is not None and reply.startswith("Error:")

    reply = await registry.handle(state, "/sort title")
    assert reply is not None and reply.startswith("Error:")


@pytest.mark.asyncio
async def test_filter_search_sort(state: AppState, store: FakeRecordStore) -> None:
    store._insert("task", {"Name": "Mockups", "title": "Mockups", "category": "design", "priority": "low"})
    store._insert("task", {"Name": "API", "title": "API", "category": "development", "priority": "high"})
    await state.engine.load()

    assert await registry.handle(state, "/filter design") == "Filtering by category: design"
    listing = await registry.handle(state, "/list") or ""
    assert "Mockups" in listing and "API" not in listing

    assert await registry.handle(state, "/filter") == "Showing all tasks."
    reply = await registry.handle(state, "/search api")
    assert reply == "Searching for 'api' (1 matches)."

    await registry.handle(state, "/search")
    assert await registry.handle(state, "/sort priority") == "Sorted by priority."
    assert [t.title for t in state.engine.view()] == ["API", "Mockups"]

    cats = await registry.handle(state, "/cats") or ""
    assert "design" in cats and "(1)" in cats


@pytest.mark.asyncio
async def test_draft_tags_carry_into_add(state: AppState, store: FakeRecordStore) -> None:
    assert await registry.handle(state, "/tag urgent") == "Draft tags: urgent"
    assert await registry.handle(state, "/tag urgent") == "Tag not added. Draft tags: urgent"
    assert await registry.handle(state, "/tag backend") == "Draft tags: urgent, backend"
    assert await registry.handle(state, "/untag urgent") == "Draft tags: backend"

    await registry.handle(state, "/add Deploy")
    (row,) = store.rows("task")
    assert row["Tags"] == "backend"
    assert state.engine.draft.tags == []


def test_format_due_date() -> None:
    today = date(2026, 3, 10)
    at = lambda d: datetime(2026, 3, d, 9, 0, tzinfo=UTC)  # noqa: E731

    assert format_due_date(at(10), today=today) == "Today"
    assert format_due_date(at(11), today=today) == "Tomorrow"
    assert format_due_date(at(9), today=today) == "Yesterday"
    assert format_due_date(at(2), today=today) == "Mar 2, 2026"


def test_parse_task_id() -> None:
    assert parse_task_id("12") == 12
    assert parse_task_id("#7") == 7
    assert parse_task_id("rec_abc") == "rec_abc"


@pytest.mark.asyncio
async def test_rejected_add_does_not_leak_into_next_add(state: AppState, store: FakeRecordStore) -> None:
    await registry.handle(state, "/tag keep")

    reply = await registry.handle(state, "/add Secret --priority high --due tomorrow")
    assert reply is not None and reply.startswith("Error: Bad due date")
    assert state.engine.draft.title == ""
    assert state.engine.draft.tags == ["keep"]

    reply = await registry.handle(state, "/add --priority low")
    assert reply is not None and reply.startswith("Error:")
    assert store.rows("task") == []

    reply = await registry.handle(state, "/add Public")
    assert reply is not None and reply.startswith("Created #")
    (row,) = store.rows("task")
    assert row["title"] == "Public"
    assert row["priority"] == "medium"
    assert row["Tags"] == "keep"


@pytest.mark.asyncio
async def test_edit_keeps_tags_staged_for_add(state: AppState, store: FakeRecordStore) -> None:
    row = store._insert("task", {"Name": "Old", "title": "Old", "priority": "low", "Tags": ""})
    await state.engine.load()

    await registry.handle(state, "/tag urgent")
    reply = await registry.handle(state, f"/edit {row['Id']} --priority high")
    assert reply == f"Updated #{row['Id']}: Old"

    await registry.handle(state, "/add New")

    rows = {r["title"]: r for r in store.rows("task")}
    assert rows["Old"]["priority"] == "high"
    assert rows["Old"]["Tags"] == ""
    assert rows["New"]["Tags"] == "urgent"


@pytest.mark.asyncio
async def test_done_accepts_numeric_text_for_string_ids(state: AppState, store: FakeRecordStore) -> None:
    store._insert("task", {"Id": "12", "Name": "Text id", "title": "Text id", "completed": ""})
    await state.engine.load()

    assert await registry.handle(state, "/done 12") == "#12 is now done."
    assert store.rows("task")[0]["completed"] == "completed"

from __future__ import annotations

from collections.abc import AsyncIterator
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio
from prompt_toolkit.keys import Keys

from tests.helpers.store import InMemoryTodoStore
from tests.helpers.transport import RecordingTransport
from todolist.client.api import Todo, TodoApi
from todolist.client.app import TodoApp
from todolist.client.state import EditState, TodoState
from todolist.client.tui import Shortcut, apply_shortcut, build_key_bindings, handle_line, render


def _text(state: TodoState) -> str:
    return "".join(fragment[1] for fragment in render(state))


def test_render_loading_hides_list() -> None:
    state = TodoState(todos=[Todo(id="1", title="hidden")])
    out = _text(state)
    assert "Loading..." in out
    assert "hidden" not in out


def test_render_list_banner_and_labels() -> None:
    state = TodoState(
        todos=[Todo(id="1", title="A"), Todo(id="2", title="B", completed=True)],
        loading=False,
        error="Failed to fetch todos. Please try again.",
    )
    out = _text(state)
    assert "Failed to fetch todos" in out
    assert "  1. [ ] A" in out
    assert "  2. [x] B" in out
    assert "/all: Mark All" in out
    assert "Ctrl + A: Mark/Unmark All" in out
    assert "Ctrl + D: Delete All Completed" in out


def test_render_unmark_label_and_edit_draft() -> None:
    state = TodoState(
        todos=[Todo(id="1", title="A", completed=True)],
        loading=False,
        edit=EditState(todo_id="1", draft="A edited"),
    )
    out = _text(state)
    assert "/all: Unmark All" in out
    assert "A edited  (editing)" in out


def test_render_respects_filter() -> None:
    state = TodoState(
        todos=[Todo(id="1", title="open"), Todo(id="2", title="done", completed=True)],
        loading=False,
        filter="pending",
    )
    out = _text(state)
    assert "open" in out
    assert "[x] done" not in out


def test_shortcut_bindings_replace_default_handling() -> None:
    kb = build_key_bindings()
    keys = {b.keys for b in kb.bindings}
    assert keys == {(Keys.ControlA,), (Keys.ControlD,)}

    results: list[Any] = []
    event = SimpleNamespace(
        app=SimpleNamespace(
            exit=lambda result: results.append(result),
            current_buffer=SimpleNamespace(text="half typed"),
        )
    )
    for binding in kb.bindings:
        binding.handler(event)
    assert set(results) == {Shortcut("c-a", "half typed"), Shortcut("c-d", "half typed")}


class _AlwaysYes:
    async def __call__(self, message: str) -> bool:
        return True


@pytest_asyncio.fixture()
async def app() -> AsyncIterator[tuple[TodoApp, InMemoryTodoStore]]:
    store = InMemoryTodoStore()
    api = TodoApi("http://test", transport=RecordingTransport(store))
    todo_app = TodoApp(api, confirm=_AlwaysYes())
    await todo_app.load()
    yield todo_app, store
    await api.aclose()


@pytest.mark.asyncio
async def test_plain_line_adds_task(app: tuple[TodoApp, InMemoryTodoStore]) -> None:
    todo_app, store = app
    assert await handle_line(todo_app, "Buy milk") is True
    assert await handle_line(todo_app, "/add Walk dog") is True
    assert [t.title for t in todo_app.state.todos] == ["Walk dog", "Buy milk"]
    assert len(store.list_tasks()) == 2


@pytest.mark.asyncio
async def test_commands_use_visible_numbering(app: tuple[TodoApp, InMemoryTodoStore]) -> None:
    todo_app, store = app
    await handle_line(todo_app, "first")
    await handle_line(todo_app, "second")  # list is now [second, first]

    await handle_line(todo_app, "/toggle 2")
    assert [(t.title, t.completed) for t in todo_app.state.todos] == [
        ("second", False),
        ("first", True),
    ]

    await handle_line(todo_app, "/filter completed")
    await handle_line(todo_app, "/edit 1")
    assert todo_app.state.edit is not None
    assert todo_app.state.edit.draft == "first"

    await handle_line(todo_app, "/filter all")
    await handle_line(todo_app, "/delete 1")
    assert [t.title for t in todo_app.state.todos] == ["first"]


@pytest.mark.asyncio
async def test_bulk_commands(app: tuple[TodoApp, InMemoryTodoStore]) -> None:
    todo_app, store = app
    for title in ("a", "b", "c"):
        await handle_line(todo_app, title)

    await handle_line(todo_app, "/all")
    assert todo_app.state.all_completed
    await handle_line(todo_app, "/clear")
    assert todo_app.state.todos == []
    assert store.list_tasks() == []


@pytest.mark.asyncio
async def test_bad_input_is_reported(
    app: tuple[TodoApp, InMemoryTodoStore], capsys: pytest.CaptureFixture[str]
) -> None:
    todo_app, _ = app
    await handle_line(todo_app, "/toggle 9")
    await handle_line(todo_app, "/filter nope")
    await handle_line(todo_app, "/bogus")
    out = capsys.readouterr().out
    assert "no task numbered '9'" in out
    assert "usage: /filter" in out
    assert "unknown command /bogus" in out


@pytest.mark.asyncio
async def test_quit(app: tuple[TodoApp, InMemoryTodoStore]) -> None:
    todo_app, _ = app
    assert await handle_line(todo_app, "/quit") is False


@pytest.mark.asyncio
async def test_shortcut_during_edit_keeps_typed_draft(
    app: tuple[TodoApp, InMemoryTodoStore],
) -> None:
    todo_app, store = app
    await handle_line(todo_app, "A")
    await handle_line(todo_app, "/edit 1")

    assert await apply_shortcut(todo_app, Shortcut("c-a", "A renamed")) is True

    assert todo_app.state.all_completed
    assert todo_app.state.edit is not None
    assert todo_app.state.edit.draft == "A renamed"
    assert store.list_tasks()[0].title == "A"
    assert "A renamed  (editing)" in _text(todo_app.state)


@pytest.mark.asyncio
async def test_shortcut_keeps_unsent_new_title(app: tuple[TodoApp, InMemoryTodoStore]) -> None:
    todo_app, store = app
    await handle_line(todo_app, "A")

    await apply_shortcut(todo_app, Shortcut("c-a", "not sent yet"))

    assert todo_app.state.new_title == "not sent yet"
    assert [t.title for t in store.list_tasks()] == ["A"]

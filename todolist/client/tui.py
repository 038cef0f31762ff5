"""Terminal front end for the todo client.

The screen is re-rendered from ``TodoState`` after every action. Typing a
line and pressing Enter adds a task; slash commands drive the rest. Ctrl+A
and Ctrl+D are bound globally and replace prompt_toolkit's default
line-start and end-of-file handling.
"""

from __future__ import annotations

from dataclasses import dataclass

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.styles import Style

from .app import SHORTCUTS, TodoApp
from .state import FILTERS, TodoState

HELP = (
    "<text>            add a task\n"
    "/add <text>       add a task\n"
    "/toggle N         complete or reopen task N\n"
    "/edit N           edit the title of task N (Enter saves, Ctrl+C cancels)\n"
    "/delete N         delete task N\n"
    "/all              mark all / unmark all\n"
    "/clear            delete all completed\n"
    "/filter all|completed|pending\n"
    "/reload           fetch the list again\n"
    "/quit"
)

STYLE = Style.from_dict(
    {
        "title": "bold",
        "error": "bg:ansired ansiwhite",
        "filter.active": "reverse",
        "done": "ansigreen",
        "pending": "",
        "editing": "ansiyellow",
        "dim": "ansibrightblack",
    }
)


@dataclass(frozen=True, slots=True)
class Shortcut:
    key: str
    # Prompt contents when the key was pressed
    text: str = ""


def render(state: TodoState) -> FormattedText:
    frags: list[tuple[str, str]] = [("class:title", "✨ My To-Do List\n")]
    if state.error:
        frags.append(("class:error", f" {state.error} "))
        frags.append(("", "\n"))

    frags.append(("", "Filter: "))
    for f in FILTERS:
        style = "class:filter.active" if state.filter == f else ""
        frags.append((style, f" {f.capitalize()} "))
    frags.append(("", "\n"))

    mark_label = "Unmark All" if state.all_completed else "Mark All"
    frags.append(("class:dim", f"/all: {mark_label}   /clear: Delete All Completed\n"))

    if state.loading:
        frags.append(("", "Loading...\n"))
    else:
        visible = state.visible()
        if not visible:
            frags.append(("class:dim", "(nothing here)\n"))
        for i, todo in enumerate(visible, start=1):
            box = "[x]" if todo.completed else "[ ]"
            style = "class:done" if todo.completed else "class:pending"
            if state.edit is not None and state.edit.todo_id == todo.id:
                frags.append(("class:editing", f"{i:>3}. {box} {state.edit.draft}  (editing)\n"))
            else:
                frags.append((style, f"{i:>3}. {box} {todo.title}\n"))

    frags.append(("class:dim", "Keyboard shortcuts:\n"))
    frags.append(("class:dim", "  Ctrl + A: Mark/Unmark All\n  Ctrl + D: Delete All Completed\n"))
    return FormattedText(frags)


def build_key_bindings() -> KeyBindings:
    kb = KeyBindings()

    for key in SHORTCUTS:

        @kb.add(key, eager=True)
        def _(event: KeyPressEvent, key: str = key) -> None:
            # Leave the prompt with the shortcut instead of the default handling
            event.app.exit(result=Shortcut(key, event.app.current_buffer.text))

    return kb


def _resolve_index(state: TodoState, arg: str) -> str | None:
    visible = state.visible()
    try:
        n = int(arg)
    except ValueError:
        return None
    if 1 <= n <= len(visible):
        return visible[n - 1].id
    return None


async def apply_shortcut(app: TodoApp, shortcut: Shortcut) -> bool:
    """Keep whatever was typed at the prompt, then run the shortcut."""
    if app.state.edit is not None:
        app.set_draft(shortcut.text)
    else:
        app.state.new_title = shortcut.text
    return await app.handle_key(shortcut.key)


async def handle_line(app: TodoApp, line: str) -> bool:
    """Apply one input line to the app. Returns False when the user quits."""
    text = line.strip()
    if not text:
        return True
    if not text.startswith("/"):
        await app.add(line)
        return True

    cmd, _, arg = text.partition(" ")
    arg = arg.strip()
    if cmd == "/quit":
        return False
    if cmd == "/help":
        print(HELP)
    elif cmd == "/add":
        await app.add(arg)
    elif cmd == "/all":
        await app.toggle_all()
    elif cmd == "/clear":
        await app.delete_completed()
    elif cmd == "/reload":
        await app.load()
    elif cmd == "/filter":
        if arg in FILTERS:
            app.set_filter(arg)
        else:
            print("usage: /filter all|completed|pending")
    elif cmd in {"/toggle", "/edit", "/delete"}:
        todo_id = _resolve_index(app.state, arg)
        if todo_id is None:
            print(f"no task numbered {arg!r}")
        elif cmd == "/toggle":
            await app.toggle(todo_id)
        elif cmd == "/edit":
            app.start_edit(todo_id)
        else:
            await app.delete(todo_id)
    else:
        print(f"unknown command {cmd}; try /help")
    return True


async def run(app: TodoApp, session: PromptSession[object] | None = None) -> None:
    if session is None:
        session = PromptSession(key_bindings=build_key_bindings())
    await app.load()
    while True:
        print_formatted_text(render(app.state), style=STYLE)
        try:
            if app.state.edit is not None:
                result = await session.prompt_async("edit> ", default=app.state.edit.draft)
            else:
                result = await session.prompt_async("> ", default=app.state.new_title)
        except KeyboardInterrupt:
            if app.state.edit is not None:
                app.cancel_edit()
                continue
            return
        if isinstance(result, Shortcut):
            await apply_shortcut(app, result)
            continue
        if app.state.edit is not None:
            app.set_draft(str(result))
            await app.save_edit()
            continue
        # A failed add puts its text back here for the next prompt
        app.state.new_title = ""
        if not await handle_line(app, str(result)):
            return


async def confirm_prompt(message: str) -> bool:
    # Separate session so the global shortcuts cannot answer the question
    try:
        answer = await PromptSession[str]().prompt_async(f"{message} (y/N) ")
    except (KeyboardInterrupt, EOFError):
        return False
    return answer.strip().lower() in {"y", "yes"}


__all__ = [
    "Shortcut",
    "apply_shortcut",
    "build_key_bindings",
    "confirm_prompt",
    "handle_line",
    "render",
    "run",
]

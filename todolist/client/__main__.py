from __future__ import annotations

import argparse
import asyncio

from .api import DEFAULT_BASE_URL, TodoApi
from .app import TodoApp
from .tui import confirm_prompt, run


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser("todolist")
    p.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"API origin (default {DEFAULT_BASE_URL})",
    )
    return p.parse_args(argv)


async def _main(base_url: str) -> None:
    api = TodoApi(base_url)
    try:
        await run(TodoApp(api, confirm=confirm_prompt))
    finally:
        await api.aclose()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    asyncio.run(_main(str(args.base_url)))


if __name__ == "__main__":
    main()

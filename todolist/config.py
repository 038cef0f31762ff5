from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

DEFAULT_PORT = 5000

# Level names uvicorn.Config accepts
UVICORN_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


@dataclass(slots=True)
class ServerConfig:
    redis_url: str
    key_prefix: str
    host: str
    port: int
    log_level: str


def _parse_port(raw: str | None) -> int:
    value = (raw or "").strip()
    try:
        port = int(value) if value else DEFAULT_PORT
    except ValueError:
        return DEFAULT_PORT
    return port if 0 < port < 65536 else DEFAULT_PORT


def _parse_log_level(raw: str | None) -> str:
    name = (raw or "").strip().lower()
    if name in UVICORN_LOG_LEVELS:
        return name
    # Aliases the logging module knows, e.g. warn -> warning, fatal -> critical
    level = getattr(logging, name.upper(), None) if name else None
    if isinstance(level, int):
        canonical = logging.getLevelName(level).lower()
        if canonical in UVICORN_LOG_LEVELS:
            return canonical
    return "info"


def load_config(env: dict[str, str] | None = None) -> ServerConfig:
    """Read server settings from the environment once at process start."""
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    return ServerConfig(
        redis_url=e.get("REDIS_URL") or "redis://localhost:6379/0",
        key_prefix=e.get("TODO_STORE_PREFIX") or "todo",
        host=e.get("HOST") or "0.0.0.0",
        port=_parse_port(e.get("PORT")),
        log_level=_parse_log_level(e.get("LOG_LEVEL")),
    )


__all__ = ["DEFAULT_PORT", "ServerConfig", "load_config"]

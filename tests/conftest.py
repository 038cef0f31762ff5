from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from functools import lru_cache

import pytest

from todolist.observability import reset_metrics

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _redis_ping(url: str) -> bool:
    try:
        import redis

        return bool(redis.Redis.from_url(url, socket_connect_timeout=1).ping())
    except Exception:
        return False


@lru_cache(maxsize=1)
def _available_redis_url() -> str | None:
    """Prefer REDIS_URL when reachable, then the default local Redis."""
    env_url = os.getenv("REDIS_URL")
    if env_url and _redis_ping(env_url):
        return env_url
    if _redis_ping(DEFAULT_REDIS_URL):
        return DEFAULT_REDIS_URL
    return None


@pytest.fixture(scope="session")
def redis_url() -> str:
    url = _available_redis_url()
    if url is None:
        pytest.skip("Redis not available; set REDIS_URL or start a local Redis")
    return url


@pytest.fixture()
def key_prefix() -> Generator[str, None, None]:
    prefix = f"testtodo:{uuid.uuid4()}"
    yield prefix
    url = _available_redis_url()
    if url is None:
        return
    import redis

    client = redis.Redis.from_url(url)
    keys = list(client.scan_iter(match=f"{prefix}:*"))
    if keys:
        client.delete(*keys)


@pytest.fixture(autouse=True)
def _fresh_metrics() -> None:
    reset_metrics()


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests that need Redis when no server is reachable."""
    if _available_redis_url() is not None:
        return
    skip = pytest.mark.skip(reason="Redis not available; set REDIS_URL or start local Redis")
    for item in items:
        fixtures = set(getattr(item, "fixturenames", []) or [])
        if "redis" in item.keywords or "redis_url" in fixtures:
            item.add_marker(skip)

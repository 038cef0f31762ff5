from __future__ import annotations

import uvicorn

from todolist.config import ServerConfig, load_config
from todolist.observability import configure_uvicorn_logging, get_json_logger
from todolist.store import StoreUnavailable, TodoStore
from todolist.store.redis_store import RedisTodoStore

from .app import create_app


def build_server(cfg: ServerConfig, store: TodoStore) -> uvicorn.Server:
    app = create_app(store)
    # log_config=None keeps uvicorn from replacing our handlers via dictConfig
    config = uvicorn.Config(
        app, host=cfg.host, port=cfg.port, log_level=cfg.log_level, log_config=None
    )
    configure_uvicorn_logging()
    return uvicorn.Server(config)


def main() -> None:
    cfg = load_config()
    logger = get_json_logger("todolist")
    store = RedisTodoStore(url=cfg.redis_url, key_prefix=cfg.key_prefix)
    # Report connectivity at startup; requests still map outages to 503
    try:
        store.ping()
        logger.info("store connected", extra={"event": "store_connected", "service": "api"})
    except StoreUnavailable:
        logger.error(
            "store connection error",
            extra={"event": "store_unavailable", "service": "api"},
            exc_info=True,
        )
    server = build_server(cfg, store)
    logger.info(
        "server starting",
        extra={
            "event": "server_start",
            "service": "api",
            "attributes": {"host": cfg.host, "port": cfg.port, "redis_url": cfg.redis_url},
        },
    )
    server.run()


if __name__ == "__main__":
    main()

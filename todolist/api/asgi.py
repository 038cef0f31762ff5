from __future__ import annotations

from todolist.config import load_config
from todolist.store.redis_store import RedisTodoStore

from .app import create_app

_cfg = load_config()
_store = RedisTodoStore(url=_cfg.redis_url, key_prefix=_cfg.key_prefix)
app = create_app(_store)

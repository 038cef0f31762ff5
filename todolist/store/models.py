from __future__ import annotations

import datetime as _dt
import uuid
from typing import Any

from pydantic import BaseModel, Field


class Task(BaseModel):
    """A todo task persisted in the store.

    - Listed in ascending created_at order by default
    - Only id, title and completed travel over the wire
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    completed: bool = False
    created_at: _dt.datetime = Field(default_factory=lambda: _dt.datetime.now(_dt.UTC))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", include={"id", "title", "completed"})


__all__ = ["Task"]

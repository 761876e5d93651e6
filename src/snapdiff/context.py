from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field


class RunContext(BaseModel):
    """Identifies one test run; created once at process start and passed around."""

    model_config = ConfigDict(frozen=True)

    started_at: int = Field(ge=0)

    @classmethod
    def create(cls, started_at: int | None = None) -> RunContext:
        return cls(started_at=int(time.time()) if started_at is None else started_at)

    @property
    def run_id(self) -> str:
        return str(self.started_at)

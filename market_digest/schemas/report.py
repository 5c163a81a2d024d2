"""
Report Run Schemas

Outcome of a single pipeline run, returned to the trigger surface.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    NO_DATA = "no_data"
    GENERATION_FAILED = "generation_failed"
    DELIVERY_FAILED = "delivery_failed"
    FAILED = "failed"


class RunTrigger(str, Enum):
    SCHEDULE = "schedule"
    MANUAL = "manual"


class RunResult(BaseModel):
    """Result of one report run."""

    status: RunStatus
    trigger: RunTrigger = RunTrigger.MANUAL
    quote_count: int = 0
    indicator_count: int = 0
    segments_sent: int = 0
    message_ids: list[int] = Field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCEEDED

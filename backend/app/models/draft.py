"""
Draft-related Pydantic models.
"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional


class DraftRequest(BaseModel):
    """Fully rendered draft for one row."""
    to: str
    subject: str
    body: str


class BatchResult(BaseModel):
    """Counts accumulated over one batch run."""
    created_count: int = 0
    skipped_count: int = 0


class BatchState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class CreateDraftsRequest(BaseModel):
    """Batch request; template replaces the stored one when given."""
    template: Optional[str] = None


class CreateDraftsResponse(BaseModel):
    """Batch outcome shown to the user."""
    created: int
    skipped: int
    message: str


class BatchStatusResponse(BaseModel):
    state: BatchState
    loaded_rows: int
    error: Optional[str] = None

"""
Draft batch endpoints.

Endpoint: POST /api/drafts
Request: { "template"?: "subject\n---\nbody" }
Response: { "created": 2, "skipped": 1, "message": "2 drafts created successfully! ..." }

Creates one Gmail draft per row of the sheet loaded in this session.
A Gmail failure aborts the batch and is returned as an error; rows
already drafted stay in Gmail.
"""
from fastapi import APIRouter, Depends

from app.models.draft import (
    BatchState,
    BatchStatusResponse,
    CreateDraftsRequest,
    CreateDraftsResponse,
)
from app.models.template import EmailTemplate
from app.services.draft_batch_service import DraftBatchRunner, summarize
from app.services.session_service import SessionContext, get_current_session
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/drafts", response_model=CreateDraftsResponse)
async def create_drafts(
    request: CreateDraftsRequest,
    session: SessionContext = Depends(get_current_session),
):
    """Run a draft batch over the loaded sheet."""
    if request.template is not None:
        session.template = EmailTemplate.from_combined(request.template)

    logger.info(f"Draft batch requested by {session.current_session().email}")

    result = await DraftBatchRunner(session).run()

    return CreateDraftsResponse(
        created=result.created_count,
        skipped=result.skipped_count,
        message=summarize(result),
    )


@router.get("/drafts/status", response_model=BatchStatusResponse)
async def drafts_status(session: SessionContext = Depends(get_current_session)):
    """Last batch state and how many rows are loaded."""
    return BatchStatusResponse(
        state=session.batch_state or BatchState.IDLE,
        loaded_rows=len(session.sheet.rows) if session.sheet else 0,
        error=session.batch_error,
    )

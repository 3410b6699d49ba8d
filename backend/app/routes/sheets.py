"""
Sheet loading endpoint.

Endpoint: POST /api/load-sheet
Request: { "sheetUrl": "https://docs.google.com/spreadsheets/d/<id>/edit" }
Response: { "headers": [...], "data": [ {header: value, ...}, ... ] }

Errors (body { "error": "...", "code": "..." }):
- 400: invalid URL, empty or duplicated headers
- 404: sheet has no data
- 500: service account not configured, Google API failure

When the caller is signed in, the loaded table is also kept in their
session for the next draft batch. Starting a load discards the
previous table; a load that finishes after a newer one started is
returned to its caller but not kept.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from app.models.sheet import LoadSheetRequest, LoadSheetResponse
from app.services.session_service import SessionContext, get_optional_session
from app.services.sheet_service import load_sheet
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/load-sheet", response_model=LoadSheetResponse)
async def load_sheet_route(
    request: LoadSheetRequest,
    session: Optional[SessionContext] = Depends(get_optional_session),
):
    """Load the first worksheet of a Google Sheet as a contact table."""
    ticket = session.begin_sheet_load() if session else None

    table = await load_sheet(request.sheet_url)

    if session:
        session.finish_sheet_load(ticket, table)

    return LoadSheetResponse(headers=table.headers, data=table.rows)

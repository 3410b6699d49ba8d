"""
Sheet service - turns a Google Sheet into a contact table.

This module provides:
1. The grid -> SheetTable transform (header validation, ragged-row padding)
2. Fetching the first worksheet through the Sheets client
3. The URL-to-table entry point used by the load-sheet route
"""
from typing import Any, List, Optional, Sequence

from app.config import get_settings
from app.integrations.sheets_client import (
    SheetsClient,
    extract_sheet_id,
    load_service_account_credentials,
)
from app.models.sheet import SheetTable
from app.utils.logger import get_logger
from app.utils.errors import EmptySheetError, InvalidHeaderError

logger = get_logger(__name__)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def build_sheet_table(grid: Optional[Sequence[Sequence[Any]]]) -> SheetTable:
    """
    Convert a 2-D grid of cell values into a SheetTable.

    Row 0 is the header row. Every later row becomes a mapping from
    header to the cell in the same column; rows shorter than the header
    row are padded with empty strings and extra cells are dropped.

    Raises:
        EmptySheetError: Grid has no rows
        InvalidHeaderError: A header is blank or repeated
    """
    if not grid:
        raise EmptySheetError()

    headers = [_cell_text(cell) for cell in grid[0]]

    if not headers or any(not header.strip() for header in headers):
        raise InvalidHeaderError()

    if len(set(headers)) != len(headers):
        duplicates = sorted({h for h in headers if headers.count(h) > 1})
        raise InvalidHeaderError(f"Sheet headers must be unique. Duplicated: {', '.join(duplicates)}")

    rows = []
    for raw_row in grid[1:]:
        row = {}
        for index, header in enumerate(headers):
            row[header] = _cell_text(raw_row[index]) if index < len(raw_row) else ""
        rows.append(row)

    return SheetTable(headers=headers, rows=rows)


async def fetch_sheet_table(sheet_id: str, credentials, client: SheetsClient = None) -> SheetTable:
    """
    Fetch the first worksheet of a spreadsheet as a SheetTable.

    Flow:
    1. Read spreadsheet metadata for the first sheet's title
    2. Read all values for that sheet
    3. Normalize into headers + rows

    Args:
        sheet_id: Spreadsheet ID
        credentials: Service account credentials
        client: Optional pre-built client

    Returns:
        SheetTable
    """
    client = client or SheetsClient(credentials)

    title = await client.get_first_sheet_title(sheet_id)
    if not title:
        title = get_settings().default_sheet_name
        logger.info(f"No sheet title in metadata, falling back to '{title}'")

    grid: List[List[str]] = await client.get_values(sheet_id, title)
    table = build_sheet_table(grid)

    logger.info(f"Loaded sheet {sheet_id} ({title}): {len(table.headers)} columns, {len(table.rows)} rows")
    return table


async def load_sheet(sheet_url: str, client: SheetsClient = None) -> SheetTable:
    """
    Load a sheet from its URL.

    Raises:
        InvalidUrlError, MissingCredentialsError, EmptySheetError,
        InvalidHeaderError, UpstreamError
    """
    sheet_id = extract_sheet_id(sheet_url)

    credentials = None
    if client is None:
        credentials = load_service_account_credentials()

    return await fetch_sheet_table(sheet_id, credentials, client=client)

"""
Unit tests for sheet ingestion.

The grid transform is tested directly; fetching is tested with the
Sheets client mocked out.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.services.sheet_service import build_sheet_table, fetch_sheet_table, load_sheet
from app.utils.errors import (
    EmptySheetError,
    InvalidHeaderError,
    InvalidUrlError,
    MissingCredentialsError,
    UpstreamError,
)


class TestBuildSheetTable:
    """Grid -> SheetTable transform."""

    def test_short_row_padded_with_empty_string(self):
        table = build_sheet_table([["name", "email"], ["Ann", "ann@x.com"], ["Bo"]])

        assert table.headers == ["name", "email"]
        assert table.rows == [
            {"name": "Ann", "email": "ann@x.com"},
            {"name": "Bo", "email": ""},
        ]

    def test_every_row_has_header_keys(self, sheet_grid):
        table = build_sheet_table(sheet_grid)

        for row in table.rows:
            assert list(row.keys()) == table.headers

    def test_extra_cells_dropped(self):
        table = build_sheet_table([["name"], ["Ann", "stray"]])
        assert table.rows == [{"name": "Ann"}]

    def test_header_only_sheet_has_no_rows(self):
        table = build_sheet_table([["name", "email"]])
        assert table.headers == ["name", "email"]
        assert table.rows == []

    def test_non_string_cells_converted(self):
        table = build_sheet_table([["name", "age"], ["Ann", 42], [None, None]])
        assert table.rows == [{"name": "Ann", "age": "42"}, {"name": "", "age": ""}]

    @pytest.mark.parametrize("grid", [[], None])
    def test_empty_grid(self, grid):
        with pytest.raises(EmptySheetError) as exc:
            build_sheet_table(grid)
        assert exc.value.status_code == 404
        assert exc.value.message == "No data found in the sheet"

    @pytest.mark.parametrize("headers", [["name", ""], ["name", "   "], []])
    def test_blank_header_rejected(self, headers):
        with pytest.raises(InvalidHeaderError) as exc:
            build_sheet_table([headers, ["Ann", "x"]])
        assert exc.value.status_code == 400

    def test_duplicate_header_rejected(self):
        with pytest.raises(InvalidHeaderError) as exc:
            build_sheet_table([["email", "name", "email"], ["a", "b", "c"]])
        assert "email" in exc.value.message


class TestFetchSheetTable:
    """Metadata + values fetch through the Sheets client."""

    @pytest.fixture
    def sheets_client(self, sheet_grid):
        client = MagicMock()
        client.get_first_sheet_title = AsyncMock(return_value="Contacts")
        client.get_values = AsyncMock(return_value=sheet_grid)
        return client

    @pytest.mark.asyncio
    async def test_reads_first_sheet(self, sheets_client):
        table = await fetch_sheet_table("ABC123", None, client=sheets_client)

        sheets_client.get_first_sheet_title.assert_awaited_once_with("ABC123")
        sheets_client.get_values.assert_awaited_once_with("ABC123", "Contacts")
        assert table.headers == ["name", "email", "company"]
        assert len(table.rows) == 3
        assert table.rows[2] == {"name": "Cy", "email": "cy@x.com", "company": ""}

    @pytest.mark.asyncio
    async def test_falls_back_to_default_sheet_name(self, sheets_client):
        sheets_client.get_first_sheet_title.return_value = None

        await fetch_sheet_table("ABC123", None, client=sheets_client)

        sheets_client.get_values.assert_awaited_once_with("ABC123", "Sheet1")

    @pytest.mark.asyncio
    async def test_empty_values(self, sheets_client):
        sheets_client.get_values.return_value = []

        with pytest.raises(EmptySheetError):
            await fetch_sheet_table("ABC123", None, client=sheets_client)

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self, sheets_client):
        sheets_client.get_first_sheet_title.side_effect = UpstreamError("The caller does not have permission")

        with pytest.raises(UpstreamError) as exc:
            await fetch_sheet_table("ABC123", None, client=sheets_client)
        assert exc.value.message == "Failed to load Google Sheet data: The caller does not have permission"


class TestLoadSheet:
    """URL -> table entry point."""

    @pytest.mark.asyncio
    async def test_invalid_url_fails_before_any_call(self):
        with patch("app.services.sheet_service.load_service_account_credentials") as mock_creds:
            with pytest.raises(InvalidUrlError):
                await load_sheet("https://example.com/not-a-sheet")
            mock_creds.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with patch(
            "app.services.sheet_service.load_service_account_credentials",
            side_effect=MissingCredentialsError(),
        ):
            with pytest.raises(MissingCredentialsError) as exc:
                await load_sheet("https://docs.google.com/spreadsheets/d/ABC123/edit")
        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_uses_extracted_id(self, sheet_grid):
        client = MagicMock()
        client.get_first_sheet_title = AsyncMock(return_value="Sheet1")
        client.get_values = AsyncMock(return_value=sheet_grid)

        table = await load_sheet("https://docs.google.com/spreadsheets/d/ABC-12_3/edit#gid=0", client=client)

        client.get_values.assert_awaited_once_with("ABC-12_3", "Sheet1")
        assert table.rows[0]["email"] == "ann@x.com"

"""
Sheet-related Pydantic models.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List


class SheetTable(BaseModel):
    """Header list plus one string mapping per data row."""
    headers: List[str]
    rows: List[Dict[str, str]] = []

    @model_validator(mode="after")
    def check_rows_match_headers(self):
        expected = set(self.headers)
        for index, row in enumerate(self.rows):
            if set(row) != expected:
                raise ValueError(f"Row {index} keys do not match headers")
        return self


class LoadSheetRequest(BaseModel):
    """Sheet load request from frontend."""
    sheet_url: str = Field(default="", alias="sheetUrl")


class LoadSheetResponse(BaseModel):
    """Loaded sheet as returned to the frontend."""
    headers: List[str]
    data: List[Dict[str, str]]

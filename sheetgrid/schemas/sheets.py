"""
Pydantic models for sheet endpoints.

A sheet is a virtualized rows x columns grid. Only edited cells are stored;
every other cell reads as "". Row records use "col_<i>" field names, the
same names the host grid widget uses in its column definitions.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, StrictInt, field_validator


class SheetCreateRequest(BaseModel):
    """
    Request model for opening a new sheet.

    Omitted dimensions fall back to the configured defaults
    (DEFAULT_ROW_COUNT x DEFAULT_COL_COUNT). Non-positive values are
    rejected by the grid with 400 invalid_dimensions.
    """
    row_count: Optional[StrictInt] = Field(None, description="Number of rows", examples=[100000])
    col_count: Optional[StrictInt] = Field(None, description="Number of columns", examples=[10])


class SheetResponse(BaseModel):
    """
    Response model for a single sheet.

    Fields:
        sheet_id: UUID of the sheet session
        row_count: Current number of rows
        col_count: Current number of columns
        edit_count: Stored (non-empty) cells, dormant ones included
        dormant_edit_count: Stored cells outside the current bounds
        generation: Bumped on every accepted resize; cached windows from an
            older generation must be discarded
        created_at: ISO-8601 timestamp
    """
    sheet_id: str = Field(..., description="Sheet UUID")
    row_count: int = Field(..., description="Number of rows")
    col_count: int = Field(..., description="Number of columns")
    edit_count: int = Field(..., description="Number of stored (non-empty) cells")
    dormant_edit_count: int = Field(0, description="Stored cells outside the current bounds")
    generation: int = Field(..., description="Resize generation")
    created_at: str = Field(..., description="Creation timestamp (ISO-8601)")


class SheetCreateResponse(BaseModel):
    """Response for successful sheet creation."""
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    sheet: SheetResponse = Field(..., description="Created sheet")
    message: str = Field(..., description="Success message")


class SheetListResponse(BaseModel):
    """Response model for listing open sheets."""
    sheets: List[SheetResponse] = Field(..., description="Open sheets, oldest first")
    count: int = Field(..., description="Number of sheets returned")


class SheetDeleteResponse(BaseModel):
    """Response for sheet teardown."""
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    sheet_id: str = Field(..., description="UUID of the deleted sheet")
    message: str = Field(..., description="Success message")


class ColumnSpecResponse(BaseModel):
    """Column definition for the host grid widget."""
    index: int = Field(..., description="Zero-based column index")
    field: str = Field(..., description="Row-record field name", examples=["col_0"])
    header_name: str = Field(..., description="Spreadsheet column label", examples=["A", "AA"])
    editable: bool = Field(True, description="Whether the column accepts edits")
    resizable: bool = Field(True, description="Whether the column can be resized")


class ColumnListResponse(BaseModel):
    columns: List[ColumnSpecResponse] = Field(..., description="Column definitions in index order")
    count: int = Field(..., description="Number of columns")


class WindowResponse(BaseModel):
    """
    Rows materialized for one viewport request.

    end_row is the exclusive end of the rows actually returned, which is
    smaller than the requested end when the window runs past the sheet.
    A response is stale (and should be dropped by the caller) when a newer
    request_id exists or the sheet generation has moved on.
    """
    request_id: int = Field(..., description="Sequence number of this window request")
    generation: int = Field(..., description="Sheet generation the rows were built against")
    start_row: int = Field(..., description="First row index returned")
    end_row: int = Field(..., description="Exclusive end of the returned rows")
    rows: List[Dict[str, str]] = Field(..., description="Row records keyed by col_<i>")
    total_row_count: int = Field(..., description="Authoritative number of rows in the sheet")


class CellResponse(BaseModel):
    """Value of a single cell."""
    row: int = Field(..., description="Row index")
    col: int = Field(..., description="Column index")
    label: str = Field(..., description="Spreadsheet address", examples=["D43"])
    value: str = Field(..., description="Cell value ('' when never edited)")


class CellUpdateRequest(BaseModel):
    """
    Committed cell edit.

    null or "" clears the cell.
    """
    value: Optional[str] = Field(None, description="New cell value; null or '' clears the cell")


class CellUpdateResponse(CellResponse):
    edit_count: int = Field(..., description="Stored cells after the edit")


class PasteRequest(BaseModel):
    """
    Block paste anchored at (start_row, start_col).

    Rows may have different lengths. null or "" clears the target cell.
    """
    start_row: int = Field(..., ge=0, description="Row of the top-left target cell")
    start_col: int = Field(..., ge=0, description="Column of the top-left target cell")
    values: List[List[Optional[str]]] = Field(..., description="Block of values, row-major")

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: List[List[Optional[str]]]) -> List[List[Optional[str]]]:
        """Reject blocks with no cells at all."""
        if not any(v):
            raise ValueError("values must contain at least one cell")
        return v


class PasteResponse(BaseModel):
    status: Literal["APPLIED"] = Field(..., description="Status indicator")
    cells_written: int = Field(..., description="Cells written, cleared ones included")
    edit_count: int = Field(..., description="Stored cells after the paste")


class SheetResizeRequest(BaseModel):
    """
    Request model for resizing a sheet.

    Values are checked by the grid itself, so a non-positive size reaches
    the service and is rejected with 400 invalid_dimensions rather than 422.
    """
    row_count: StrictInt = Field(..., description="New number of rows", examples=[100000])
    col_count: StrictInt = Field(..., description="New number of columns", examples=[20])


class SheetResizeResponse(BaseModel):
    status: Literal["RESIZED"] = Field(..., description="Status indicator")
    sheet: SheetResponse = Field(..., description="Sheet after the resize")


class ImportResponse(BaseModel):
    """Response model for a CSV/XLSX import."""
    status: Literal["IMPORTED"] = Field(..., description="Status indicator")
    rows_imported: int = Field(..., description="Rows read from the file")
    cells_written: int = Field(..., description="Cells written, cleared ones included")
    sheet: SheetResponse = Field(..., description="Sheet after the import")

"""
SparseGrid Type Definitions

Plain data contracts shared by the grid core, the data source and the
service layer. All types are JSON-serializable and compatible with Pydantic.
"""

from typing import Dict, List, NamedTuple, Tuple, TypedDict


# (row, col) - the only identity a cell has until it is edited
CellKey = Tuple[int, int]

# Ordered mapping of "col_<i>" -> cell value for one materialized row
RowRecord = Dict[str, str]


class GridDimensions(NamedTuple):
    """Logical bounds of the addressable space."""
    row_count: int
    col_count: int


class ColumnSpec(TypedDict):
    """Derived column definition handed to the host grid widget."""
    index: int
    field: str  # "col_<index>"
    header_name: str  # bijective base-26 label (A, B, ..., Z, AA, ...)
    editable: bool
    resizable: bool


class WindowResult(NamedTuple):
    """
    Rows materialized for one window request.

    total_row_count is the authoritative row count of the grid so the caller
    can size its viewport without a second round trip.
    """
    rows: List[RowRecord]
    total_row_count: int


class WindowResponse(NamedTuple):
    """WindowResult tagged with the request sequence and grid generation."""
    request_id: int
    generation: int
    start_row: int
    end_row: int
    rows: List[RowRecord]
    total_row_count: int

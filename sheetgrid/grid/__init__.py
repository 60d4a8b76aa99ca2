"""
SparseGrid Package

Sparse data model behind a virtualized spreadsheet view.

Main Components:
- types: NamedTuple/TypedDict definitions for dimensions, columns and windows
- sparse_grid: the SparseGrid cell store, column labels and windowing
- datasource: request/edit/resize contract consumed by the host grid widget

Usage:
    from sheetgrid.grid import GridDataSource, SparseGrid

    grid = SparseGrid(row_count=100000, col_count=10)
    grid.set_cell(42, 3, "hello")

    source = GridDataSource(grid)
    response = await source.request(40, 45)
"""

from sheetgrid.grid.datasource import GridDataSource
from sheetgrid.grid.sparse_grid import (
    InvalidDimensions,
    SparseGrid,
    column_field,
    compute_column_label,
    parse_column_field,
)
from sheetgrid.grid.types import (
    CellKey,
    ColumnSpec,
    GridDimensions,
    RowRecord,
    WindowResponse,
    WindowResult,
)

__all__ = [
    # Core
    "SparseGrid",
    "InvalidDimensions",
    "GridDataSource",
    # Helpers
    "compute_column_label",
    "column_field",
    "parse_column_field",
    # Types
    "CellKey",
    "ColumnSpec",
    "GridDimensions",
    "RowRecord",
    "WindowResponse",
    "WindowResult",
]

"""
Sheet service.

Business functions the HTTP routes call. Each function resolves the sheet
session from the registry, drives the grid through its data source, and
returns plain dicts that the routes map into Pydantic response models.

CRITICAL RULES:
1. Never log cell contents, only coordinates and counts.
2. InvalidDimensions and SheetNotFoundError propagate to the routes, which
   map them to 400 and 404.
3. Window bounds are checked here, not in the grid: the grid store is
   agnostic to dimensions.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from sheetgrid.config import settings
from sheetgrid.grid import InvalidDimensions, SparseGrid, compute_column_label, parse_column_field
from sheetgrid.services.workbook_io import iter_csv_lines, read_csv_rows, read_xlsx_rows, write_xlsx
from sheetgrid.store import SheetRegistry, SheetSession

logger = logging.getLogger(__name__)


class WindowRequestError(ValueError):
    """Raised when a window request is malformed or too large."""

    def __init__(self, error: str, details: str):
        self.error = error
        self.details = details
        super().__init__(details)


def _session_summary(session: SheetSession) -> Dict[str, Any]:
    grid = session.grid
    return {
        "sheet_id": session.sheet_id,
        "row_count": grid.row_count,
        "col_count": grid.col_count,
        "edit_count": grid.edit_count,
        "dormant_edit_count": grid.dormant_edit_count(),
        "generation": grid.generation,
        "created_at": session.created_at,
    }


def _check_window(
    start_row: int,
    end_row: int,
    col_count: int,
    max_rows: Optional[int] = None,
    max_cells: Optional[int] = None,
) -> None:
    if max_rows is None:
        max_rows = settings.MAX_WINDOW_ROWS
    if max_cells is None:
        max_cells = settings.MAX_WINDOW_CELLS

    if start_row < 0 or end_row < start_row:
        raise WindowRequestError(
            "invalid_window",
            f"Window must satisfy 0 <= start_row <= end_row (got [{start_row}, {end_row}))"
        )
    if end_row - start_row > max_rows:
        raise WindowRequestError(
            "window_too_large",
            f"Window of {end_row - start_row} rows exceeds the limit of {max_rows}"
        )
    cells = (end_row - start_row) * col_count
    if cells > max_cells:
        raise WindowRequestError(
            "window_too_large",
            f"Window of {cells} cells exceeds the limit of {max_cells}"
        )


def _check_col_limit(row_count: Any, col_count: Any) -> None:
    """Reject column counts above MAX_COL_COUNT; other checks stay with the grid."""
    if isinstance(col_count, int) and not isinstance(col_count, bool):
        if col_count > settings.MAX_COL_COUNT:
            raise InvalidDimensions(
                row_count,
                col_count,
                reason=f"Columns must not exceed {settings.MAX_COL_COUNT}",
            )


async def create_sheet(
    registry: SheetRegistry,
    row_count: Optional[int] = None,
    col_count: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Open a new sheet.

    Args:
        registry: Sheet registry
        row_count: Rows of the new sheet (settings.DEFAULT_ROW_COUNT if None)
        col_count: Columns of the new sheet (settings.DEFAULT_COL_COUNT if None)

    Returns:
        Sheet summary dict

    Raises:
        InvalidDimensions: If the dimensions are not positive integers
            or the column count exceeds MAX_COL_COUNT
    """
    rows = settings.DEFAULT_ROW_COUNT if row_count is None else row_count
    cols = settings.DEFAULT_COL_COUNT if col_count is None else col_count

    _check_col_limit(rows, cols)
    session = registry.create(rows, cols)
    return _session_summary(session)


async def list_sheets(registry: SheetRegistry) -> List[Dict[str, Any]]:
    """Summaries of every open sheet, oldest first."""
    sheets = [_session_summary(session) for session in registry.list()]
    logger.debug(f"Listing {len(sheets)} open sheets")
    return sheets


async def get_sheet(registry: SheetRegistry, sheet_id: str) -> Dict[str, Any]:
    """
    Raises:
        SheetNotFoundError: If the sheet is not open
    """
    return _session_summary(registry.get(sheet_id))


async def delete_sheet(registry: SheetRegistry, sheet_id: str) -> bool:
    """
    Tear down a sheet and discard its cell store.

    Returns:
        True if the sheet existed
    """
    return registry.delete(sheet_id)


async def get_column_specs(registry: SheetRegistry, sheet_id: str) -> List[Dict[str, Any]]:
    session = registry.get(sheet_id)
    return [dict(spec) for spec in session.grid.column_specs()]


async def get_sheet_window(
    registry: SheetRegistry,
    sheet_id: str,
    start_row: int,
    end_row: int,
) -> Dict[str, Any]:
    """
    Materialize a window of rows for the host viewport.

    Rows past the sheet's row_count are excluded, so the returned end_row
    can be smaller than the requested one.

    Raises:
        SheetNotFoundError: If the sheet is not open
        WindowRequestError: If the window is malformed or too large
    """
    session = registry.get(sheet_id)
    _check_window(start_row, end_row, session.grid.col_count)

    response = await session.source.request(start_row, end_row)

    logger.info(
        f"Sheet {sheet_id}: window [{start_row}, {end_row}) -> {len(response.rows)} rows "
        f"(request_id={response.request_id}, generation={response.generation})"
    )

    return response._asdict()


async def get_cell_value(registry: SheetRegistry, sheet_id: str, row: int, col: int) -> Dict[str, Any]:
    session = registry.get(sheet_id)
    return {
        "row": row,
        "col": col,
        "label": f"{compute_column_label(col)}{row + 1}",
        "value": session.grid.get_cell(row, col),
    }


async def update_cell(
    registry: SheetRegistry,
    sheet_id: str,
    row: int,
    col: Union[int, str],
    value: Optional[str],
) -> Dict[str, Any]:
    """
    Apply a committed cell edit from the host.

    Args:
        col: Column index or "col_<i>" field name
        value: New value; None or "" clears the cell

    Raises:
        SheetNotFoundError: If the sheet is not open
        ValueError: If col is not a valid column field name
    """
    session = registry.get(sheet_id)
    col_index = parse_column_field(col) if isinstance(col, str) else col
    session.source.on_edit(row, col_index, value)

    stored = session.grid.get_cell(row, col_index)

    logger.info(
        f"Sheet {sheet_id}: cell ({row}, {col_index}) {'updated' if stored else 'cleared'} "
        f"(edit_count={session.grid.edit_count})"
    )

    return {
        "row": row,
        "col": col_index,
        "label": f"{compute_column_label(col_index)}{row + 1}",
        "value": stored,
        "edit_count": session.grid.edit_count,
    }


async def paste_block(
    registry: SheetRegistry,
    sheet_id: str,
    start_row: int,
    start_col: int,
    values: List[List[Optional[str]]],
) -> Dict[str, Any]:
    """
    Paste a (possibly ragged) block of values anchored at (start_row, start_col).

    Empty values clear the cells they land on.
    """
    session = registry.get(sheet_id)
    written = session.grid.set_block(start_row, start_col, values)

    logger.info(
        f"Sheet {sheet_id}: pasted {written} cells at ({start_row}, {start_col}) "
        f"(edit_count={session.grid.edit_count})"
    )

    return {
        "cells_written": written,
        "edit_count": session.grid.edit_count,
    }


async def resize_sheet(
    registry: SheetRegistry,
    sheet_id: str,
    row_count: Any,
    col_count: Any,
) -> Dict[str, Any]:
    """
    Resize a sheet. Edits outside the new bounds are kept (dormant).

    Raises:
        SheetNotFoundError: If the sheet is not open
        InvalidDimensions: If the dimensions are rejected; the sheet keeps
            its previous size
    """
    session = registry.get(sheet_id)
    _check_col_limit(row_count, col_count)
    session.grid.resize(row_count, col_count)

    logger.info(
        f"Sheet {sheet_id} resized to {session.grid.row_count}x{session.grid.col_count} "
        f"({session.grid.dormant_edit_count()} dormant edits)"
    )

    return _session_summary(session)


def _export_range(
    grid: SparseGrid,
    start_row: Optional[int],
    end_row: Optional[int],
) -> Tuple[int, int]:
    """Rows to export: an explicit window, or every row up to the last visible edit."""
    if start_row is None and end_row is None:
        return 0, grid.stored_extent().row_count

    start = 0 if start_row is None else start_row
    end = grid.row_count if end_row is None else end_row
    if start < 0 or end < start:
        raise WindowRequestError(
            "invalid_window",
            f"Export range must satisfy 0 <= start_row <= end_row (got [{start}, {end}))"
        )
    return start, min(end, grid.row_count)


def _column_labels(grid: SparseGrid) -> List[str]:
    return [compute_column_label(col) for col in range(grid.col_count)]


async def export_sheet_csv(
    registry: SheetRegistry,
    sheet_id: str,
    start_row: Optional[int] = None,
    end_row: Optional[int] = None,
) -> Iterator[str]:
    """
    Render a sheet as CSV with the column labels as header row.

    Without a range, every row from 0 through the last visible edit is
    exported (dormant edits are left out). Lines are produced lazily, one
    row at a time.

    Returns:
        Iterator of CSV lines (header first)

    Raises:
        SheetNotFoundError: If the sheet is not open
        WindowRequestError: If the range is malformed
    """
    session = registry.get(sheet_id)
    grid = session.grid
    start, end = _export_range(grid, start_row, end_row)

    logger.info(f"Sheet {sheet_id}: exporting rows [{start}, {end}) as CSV")
    return iter_csv_lines(_column_labels(grid), grid.iter_rows(start, end))


async def export_sheet_xlsx(
    registry: SheetRegistry,
    sheet_id: str,
    start_row: Optional[int] = None,
    end_row: Optional[int] = None,
) -> bytes:
    """
    Render a sheet as a single-sheet .xlsx workbook.

    Same row selection as export_sheet_csv().

    Raises:
        SheetNotFoundError: If the sheet is not open
        WindowRequestError: If the range is malformed
    """
    session = registry.get(sheet_id)
    grid = session.grid
    start, end = _export_range(grid, start_row, end_row)

    content = write_xlsx(_column_labels(grid), grid.iter_rows(start, end))

    logger.info(f"Sheet {sheet_id}: exported rows [{start}, {end}) as XLSX ({len(content)} bytes)")
    return content


async def import_workbook(
    registry: SheetRegistry,
    sheet_id: str,
    file_bytes: bytes,
    file_format: str,
    start_row: int = 0,
    start_col: int = 0,
    sheet_name: Optional[str] = None,
    grow: bool = True,
    replace: bool = False,
) -> Dict[str, Any]:
    """
    Load an uploaded CSV/XLSX file into a sheet.

    The file's rows are pasted at (start_row, start_col) through
    SparseGrid.set_block(), so empty cells clear what they land on.

    Args:
        file_bytes: Uploaded file content
        file_format: "csv" or "xlsx" (see workbook_io.detect_format)
        start_row: Row of the top-left target cell
        start_col: Column of the top-left target cell
        sheet_name: Worksheet to read from an .xlsx (active sheet if None)
        grow: Enlarge the sheet when the data does not fit (never shrinks)
        replace: Drop every existing edit before importing

    Returns:
        Dict with rows_imported, cells_written, edit_count and the sheet summary

    Raises:
        SheetNotFoundError: If the sheet is not open
        WorkbookFormatError: If the file cannot be parsed
        InvalidDimensions: If growing would exceed MAX_COL_COUNT; nothing is
            written in that case
    """
    session = registry.get(sheet_id)
    grid = session.grid

    if file_format == "xlsx":
        rows = read_xlsx_rows(file_bytes, sheet_name=sheet_name)
    else:
        rows = read_csv_rows(file_bytes)

    width = max((len(row) for row in rows), default=0)
    needed_rows = start_row + len(rows)
    needed_cols = start_col + width

    if grow and (needed_rows > grid.row_count or needed_cols > grid.col_count):
        new_rows = max(grid.row_count, needed_rows)
        new_cols = max(grid.col_count, needed_cols)
        _check_col_limit(new_rows, new_cols)
        grid.resize(new_rows, new_cols)

    if replace:
        grid.clear()

    written = grid.set_block(start_row, start_col, rows)

    logger.info(
        f"Sheet {sheet_id}: imported {len(rows)} rows x {width} cols from {file_format.upper()} "
        f"at ({start_row}, {start_col}) (edit_count={grid.edit_count})"
    )

    return {
        "rows_imported": len(rows),
        "cells_written": written,
        "edit_count": grid.edit_count,
        "sheet": _session_summary(session),
    }

"""
Sheet API endpoints.

Serves a virtualized spreadsheet widget: the widget asks for windows of rows
as it scrolls, commits cell edits one at a time (or pastes blocks), and
resizes the sheet.

Endpoints:
- POST /sheets - Open a new sheet
- GET /sheets - List open sheets
- GET /sheets/{sheet_id} - Get sheet summary
- DELETE /sheets/{sheet_id} - Close a sheet (discards every edit)
- GET /sheets/{sheet_id}/columns - Column definitions (A, B, ..., AA, ...)
- GET /sheets/{sheet_id}/rows - Materialize a window of rows
- GET /sheets/{sheet_id}/cells/{row}/{col} - Read one cell
- PUT /sheets/{sheet_id}/cells/{row}/{col} - Commit one cell edit
- POST /sheets/{sheet_id}/paste - Paste a block of values
- PUT /sheets/{sheet_id}/size - Resize (400 invalid_dimensions on rejection)
- POST /sheets/{sheet_id}/import - Load a CSV or XLSX file into a sheet
- GET /sheets/{sheet_id}/export.csv - Download the sheet (or a range) as CSV
- GET /sheets/{sheet_id}/export.xlsx - Download the sheet (or a range) as XLSX
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Path, Query, UploadFile, status
from fastapi.responses import Response, StreamingResponse

from sheetgrid.config import settings
from sheetgrid.grid import InvalidDimensions
from sheetgrid.schemas.sheets import (
    CellResponse,
    CellUpdateRequest,
    CellUpdateResponse,
    ColumnListResponse,
    ColumnSpecResponse,
    ImportResponse,
    PasteRequest,
    PasteResponse,
    SheetCreateRequest,
    SheetCreateResponse,
    SheetDeleteResponse,
    SheetListResponse,
    SheetResizeRequest,
    SheetResizeResponse,
    SheetResponse,
    WindowResponse,
)
from sheetgrid.services.sheet_service import (
    WindowRequestError,
    create_sheet,
    delete_sheet,
    export_sheet_csv,
    export_sheet_xlsx,
    get_cell_value,
    get_column_specs,
    get_sheet,
    get_sheet_window,
    import_workbook,
    list_sheets,
    paste_block,
    resize_sheet,
    update_cell,
)
from sheetgrid.services.workbook_io import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    WorkbookFormatError,
    detect_format,
)
from sheetgrid.store import SheetNotFoundError, SheetRegistry, get_sheet_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sheets", tags=["sheets"])

Registry = Annotated[SheetRegistry, Depends(get_sheet_registry)]


def _not_found(sheet_id: str) -> HTTPException:
    logger.warning(f"Sheet {sheet_id} not found")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Sheet {sheet_id} not found"
        }
    )


def _invalid_dimensions(e: InvalidDimensions) -> HTTPException:
    logger.warning(f"Rejected sheet dimensions: {e}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": "invalid_dimensions",
            "details": str(e)
        }
    )


def _window_error(e: WindowRequestError) -> HTTPException:
    logger.warning(f"Rejected window request: {e.details}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": e.error,
            "details": e.details
        }
    )


def _server_error(error: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": error,
            "details": details
        }
    )


@router.post(
    "",
    response_model=SheetCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a new sheet",
    description="""
    Open a new, empty sheet.

    This endpoint:
    - Allocates no cell storage (all cells read as "")
    - Uses DEFAULT_ROW_COUNT x DEFAULT_COL_COUNT when sizes are omitted
    - Rejects non-positive sizes, or more than MAX_COL_COUNT columns, with
      400 invalid_dimensions
    """
)
async def open_sheet(request: SheetCreateRequest, registry: Registry) -> SheetCreateResponse:
    """Open a new sheet."""
    logger.info(f"Opening sheet: row_count={request.row_count}, col_count={request.col_count}")

    try:
        sheet = await create_sheet(
            registry=registry,
            row_count=request.row_count,
            col_count=request.col_count
        )
    except InvalidDimensions as e:
        raise _invalid_dimensions(e)
    except Exception as e:
        logger.error(f"Failed to open sheet: {e}", exc_info=True)
        raise _server_error("create_error", "Failed to open sheet")

    return SheetCreateResponse(
        status="CREATED",
        sheet=SheetResponse(**sheet),
        message=f"Sheet created with {sheet['row_count']} rows and {sheet['col_count']} columns"
    )


@router.get(
    "",
    response_model=SheetListResponse,
    status_code=status.HTTP_200_OK,
    summary="List open sheets"
)
async def list_open_sheets(registry: Registry) -> SheetListResponse:
    """List every open sheet."""
    sheets = await list_sheets(registry)
    return SheetListResponse(
        sheets=[SheetResponse(**sheet) for sheet in sheets],
        count=len(sheets)
    )


@router.get(
    "/{sheet_id}",
    response_model=SheetResponse,
    status_code=status.HTTP_200_OK,
    summary="Get sheet details"
)
async def get_sheet_details(sheet_id: str, registry: Registry) -> SheetResponse:
    """Get size, edit counts and generation of a sheet."""
    try:
        sheet = await get_sheet(registry, sheet_id)
    except SheetNotFoundError:
        raise _not_found(sheet_id)

    return SheetResponse(**sheet)


@router.delete(
    "/{sheet_id}",
    response_model=SheetDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Close a sheet",
    description="""
    Tear a sheet down.

    Every stored edit is discarded. Persisting cell data before closing is
    the caller's responsibility.
    """
)
async def close_sheet(sheet_id: str, registry: Registry) -> SheetDeleteResponse:
    """Close a sheet and discard its cells."""
    logger.info(f"Closing sheet {sheet_id}")

    deleted = await delete_sheet(registry, sheet_id)
    if not deleted:
        raise _not_found(sheet_id)

    return SheetDeleteResponse(
        status="DELETED",
        sheet_id=sheet_id,
        message="Sheet closed successfully"
    )


@router.get(
    "/{sheet_id}/columns",
    response_model=ColumnListResponse,
    status_code=status.HTTP_200_OK,
    summary="Get column definitions"
)
async def list_columns(sheet_id: str, registry: Registry) -> ColumnListResponse:
    """Column definitions with spreadsheet labels, in index order."""
    try:
        columns = await get_column_specs(registry, sheet_id)
    except SheetNotFoundError:
        raise _not_found(sheet_id)

    return ColumnListResponse(
        columns=[ColumnSpecResponse(**column) for column in columns],
        count=len(columns)
    )


@router.get(
    "/{sheet_id}/rows",
    response_model=WindowResponse,
    status_code=status.HTTP_200_OK,
    summary="Materialize a window of rows",
    description="""
    Return the rows [start_row, end_row) of a sheet.

    This endpoint:
    - Excludes rows past the sheet's row count (never pads)
    - Reports the authoritative total_row_count for viewport sizing
    - Tags the response with request_id and generation; callers drop
      responses that a newer request or a resize has made stale
    - Refuses windows larger than MAX_WINDOW_ROWS rows or MAX_WINDOW_CELLS
      cells (400 window_too_large)
    """
)
async def get_rows(
    sheet_id: str,
    registry: Registry,
    start_row: int = Query(0, ge=0, description="First row (inclusive)"),
    end_row: int = Query(100, ge=0, description="Last row (exclusive)")
) -> WindowResponse:
    """Materialize a window of rows."""
    try:
        window = await get_sheet_window(registry, sheet_id, start_row, end_row)
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except WindowRequestError as e:
        raise _window_error(e)
    except Exception as e:
        logger.error(f"Failed to materialize window: {e}", exc_info=True)
        raise _server_error("window_error", "Failed to materialize window")

    return WindowResponse(**window)


@router.get(
    "/{sheet_id}/cells/{row}/{col}",
    response_model=CellResponse,
    status_code=status.HTTP_200_OK,
    summary="Read one cell"
)
async def read_cell(
    sheet_id: str,
    registry: Registry,
    row: int = Path(..., ge=0),
    col: int = Path(..., ge=0)
) -> CellResponse:
    """Read one cell. Cells outside the sheet read as ''."""
    try:
        cell = await get_cell_value(registry, sheet_id, row, col)
    except SheetNotFoundError:
        raise _not_found(sheet_id)

    return CellResponse(**cell)


@router.put(
    "/{sheet_id}/cells/{row}/{col}",
    response_model=CellUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Commit a cell edit",
    description="""
    Store a new value for one cell.

    An empty value (null or "") clears the cell and removes it from
    storage. Coordinates outside the current sheet size are accepted.
    """
)
async def write_cell(
    sheet_id: str,
    request: CellUpdateRequest,
    registry: Registry,
    row: int = Path(..., ge=0),
    col: int = Path(..., ge=0)
) -> CellUpdateResponse:
    """Commit a cell edit."""
    try:
        cell = await update_cell(registry, sheet_id, row, col, request.value)
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except Exception as e:
        logger.error(f"Failed to update cell ({row}, {col}): {e}", exc_info=True)
        raise _server_error("update_error", "Failed to update cell")

    return CellUpdateResponse(**cell)


@router.post(
    "/{sheet_id}/paste",
    response_model=PasteResponse,
    status_code=status.HTTP_200_OK,
    summary="Paste a block of values"
)
async def paste_values(sheet_id: str, request: PasteRequest, registry: Registry) -> PasteResponse:
    """Paste a block anchored at (start_row, start_col)."""
    try:
        result = await paste_block(
            registry,
            sheet_id,
            start_row=request.start_row,
            start_col=request.start_col,
            values=request.values
        )
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except Exception as e:
        logger.error(f"Failed to paste block: {e}", exc_info=True)
        raise _server_error("paste_error", "Failed to paste values")

    return PasteResponse(status="APPLIED", **result)


@router.put(
    "/{sheet_id}/size",
    response_model=SheetResizeResponse,
    status_code=status.HTTP_200_OK,
    summary="Resize a sheet",
    description="""
    Change the row and column count of a sheet.

    This endpoint:
    - Rejects non-positive sizes, or more than MAX_COL_COUNT columns, with
      400 invalid_dimensions and keeps the previous size
    - Keeps edits that fall outside the new size; they reappear when the
      sheet grows back
    - Bumps the sheet generation, invalidating cached windows
    """
)
async def set_sheet_size(
    sheet_id: str,
    request: SheetResizeRequest,
    registry: Registry
) -> SheetResizeResponse:
    """Resize a sheet."""
    logger.info(f"Resizing sheet {sheet_id} to {request.row_count}x{request.col_count}")

    try:
        sheet = await resize_sheet(registry, sheet_id, request.row_count, request.col_count)
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except InvalidDimensions as e:
        raise _invalid_dimensions(e)

    return SheetResizeResponse(status="RESIZED", sheet=SheetResponse(**sheet))


@router.post(
    "/{sheet_id}/import",
    response_model=ImportResponse,
    status_code=status.HTTP_200_OK,
    summary="Import a CSV or XLSX file",
    description="""
    Load an uploaded .csv or .xlsx file into a sheet.

    This endpoint:
    - Pastes the file's rows at (start_row, start_col); empty cells clear
      what they land on
    - Grows the sheet to fit the data unless grow=false (never shrinks)
    - Drops every existing edit first when replace=true
    - Rejects files over MAX_IMPORT_BYTES with 400 file_too_large
    - Rejects unreadable files with 400 invalid_file
    - Rejects imports wider than MAX_COL_COUNT with 400 invalid_dimensions
    """
)
async def import_file(
    sheet_id: str,
    file: Annotated[UploadFile, File(description="CSV or XLSX workbook")],
    registry: Registry,
    start_row: int = Query(0, ge=0, description="Row of the top-left target cell"),
    start_col: int = Query(0, ge=0, description="Column of the top-left target cell"),
    sheet_name: Optional[str] = Query(None, description="Worksheet to read from an .xlsx"),
    grow: bool = Query(True, description="Enlarge the sheet when the data does not fit"),
    replace: bool = Query(False, description="Clear every existing edit first")
) -> ImportResponse:
    """Import an uploaded workbook into a sheet."""
    try:
        file_format = detect_format(file.filename, file.content_type)
    except WorkbookFormatError as e:
        logger.warning(f"Invalid import file type: {file.content_type}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_file_type",
                "details": str(e)
            }
        )

    file_bytes = await file.read()

    max_bytes = settings.MAX_IMPORT_BYTES
    if len(file_bytes) > max_bytes:
        logger.warning(f"Import file too large: {len(file_bytes)} bytes")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "file_too_large",
                "details": f"File must be at most {max_bytes} bytes"
            }
        )

    logger.info(
        f"Importing into sheet {sheet_id}: filename={file.filename}, "
        f"format={file_format}, size={len(file_bytes)} bytes"
    )

    try:
        result = await import_workbook(
            registry,
            sheet_id,
            file_bytes,
            file_format,
            start_row=start_row,
            start_col=start_col,
            sheet_name=sheet_name,
            grow=grow,
            replace=replace,
        )
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except WorkbookFormatError as e:
        logger.warning(f"Unreadable import file for sheet {sheet_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_file",
                "details": str(e)
            }
        )
    except InvalidDimensions as e:
        raise _invalid_dimensions(e)

    return ImportResponse(
        status="IMPORTED",
        rows_imported=result["rows_imported"],
        cells_written=result["cells_written"],
        sheet=SheetResponse(**result["sheet"]),
    )


@router.get(
    "/{sheet_id}/export.csv",
    status_code=status.HTTP_200_OK,
    summary="Export a sheet as CSV",
    response_class=StreamingResponse,
    responses={200: {"content": {CSV_MEDIA_TYPE: {}}}}
)
async def export_csv(
    sheet_id: str,
    registry: Registry,
    start_row: Optional[int] = Query(None, ge=0, description="First row (inclusive)"),
    end_row: Optional[int] = Query(None, ge=0, description="Last row (exclusive)")
) -> StreamingResponse:
    """
    Download a sheet as CSV with column labels as header row.

    Without start_row/end_row every row up to the last edited one is
    exported; rows are streamed so large sheets are never built in memory.
    """
    try:
        lines = await export_sheet_csv(registry, sheet_id, start_row, end_row)
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except WindowRequestError as e:
        raise _window_error(e)

    return StreamingResponse(
        lines,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="sheet-{sheet_id}.csv"'}
    )


@router.get(
    "/{sheet_id}/export.xlsx",
    status_code=status.HTTP_200_OK,
    summary="Export a sheet as XLSX",
    response_class=Response,
    responses={200: {"content": {XLSX_MEDIA_TYPE: {}}}}
)
async def export_xlsx(
    sheet_id: str,
    registry: Registry,
    start_row: Optional[int] = Query(None, ge=0, description="First row (inclusive)"),
    end_row: Optional[int] = Query(None, ge=0, description="Last row (exclusive)")
) -> Response:
    """Download a sheet as a single-sheet workbook (same rows as export.csv)."""
    try:
        content = await export_sheet_xlsx(registry, sheet_id, start_row, end_row)
    except SheetNotFoundError:
        raise _not_found(sheet_id)
    except WindowRequestError as e:
        raise _window_error(e)

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="sheet-{sheet_id}.xlsx"'}
    )

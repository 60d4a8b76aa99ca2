"""
Service layer for the SheetGrid service.

Contains the orchestration that:
- Resolves sheet sessions from the in-memory registry
- Validates window requests before they reach the grid
- Drives the SparseGrid through its GridDataSource
- Returns plain dicts that routes map into Pydantic ResponseModels

Services act as the glue between routes (HTTP layer) and the grid core.
"""

from .sheet_service import (
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

from .workbook_io import WorkbookFormatError, detect_format

__all__ = [
    "WindowRequestError",
    "WorkbookFormatError",
    "detect_format",
    "create_sheet",
    "list_sheets",
    "get_sheet",
    "delete_sheet",
    "get_column_specs",
    "get_sheet_window",
    "get_cell_value",
    "update_cell",
    "paste_block",
    "resize_sheet",
    "export_sheet_csv",
    "export_sheet_xlsx",
    "import_workbook",
]

"""
Tests for the sheet service.

Exercises the service functions against a real in-memory registry.
"""

import csv
import io

import pytest
from unittest.mock import patch

from openpyxl import load_workbook

from sheetgrid.grid import InvalidDimensions
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
from sheetgrid.services.workbook_io import WorkbookFormatError, write_xlsx
from sheetgrid.store import SheetNotFoundError


@pytest.fixture
def sheet_id(registry):
    return registry.create(100000, 10).sheet_id


class TestCreateSheet:
    """Tests for create_sheet()."""

    @pytest.mark.asyncio
    async def test_create_with_explicit_size(self, registry):
        sheet = await create_sheet(registry, row_count=50, col_count=4)

        assert sheet["row_count"] == 50
        assert sheet["col_count"] == 4
        assert sheet["edit_count"] == 0
        assert sheet["generation"] == 0
        assert sheet["sheet_id"] in registry

    @pytest.mark.asyncio
    async def test_create_uses_configured_defaults(self, registry):
        with patch("sheetgrid.services.sheet_service.settings") as mock_settings:
            mock_settings.DEFAULT_ROW_COUNT = 1234
            mock_settings.DEFAULT_COL_COUNT = 7
            mock_settings.MAX_COL_COUNT = 16384

            sheet = await create_sheet(registry)

        assert sheet["row_count"] == 1234
        assert sheet["col_count"] == 7

    @pytest.mark.asyncio
    async def test_create_rejects_non_positive_size(self, registry):
        with pytest.raises(InvalidDimensions):
            await create_sheet(registry, row_count=0, col_count=4)

    @pytest.mark.asyncio
    async def test_create_rejects_too_many_columns(self, registry):
        with pytest.raises(InvalidDimensions) as exc_info:
            await create_sheet(registry, row_count=1000, col_count=10**9)

        assert "16384" in str(exc_info.value)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_create_accepts_column_limit(self, registry):
        sheet = await create_sheet(registry, row_count=10, col_count=16384)

        assert sheet["col_count"] == 16384


class TestSheetLifecycle:
    """Tests for list/get/delete."""

    @pytest.mark.asyncio
    async def test_list_and_get(self, registry, sheet_id):
        sheets = await list_sheets(registry)
        sheet = await get_sheet(registry, sheet_id)

        assert [s["sheet_id"] for s in sheets] == [sheet_id]
        assert sheet["row_count"] == 100000

    @pytest.mark.asyncio
    async def test_get_unknown_sheet_raises(self, registry):
        with pytest.raises(SheetNotFoundError):
            await get_sheet(registry, "missing")

    @pytest.mark.asyncio
    async def test_delete(self, registry, sheet_id):
        assert await delete_sheet(registry, sheet_id) is True
        assert await delete_sheet(registry, sheet_id) is False
        assert await list_sheets(registry) == []


class TestWindows:
    """Tests for get_sheet_window()."""

    @pytest.mark.asyncio
    async def test_window_shows_edit(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 42, 3, "hello")

        window = await get_sheet_window(registry, sheet_id, 40, 45)

        assert window["total_row_count"] == 100000
        assert window["start_row"] == 40
        assert window["end_row"] == 45
        assert window["rows"][2] == {f"col_{c}": ("hello" if c == 3 else "") for c in range(10)}

    @pytest.mark.asyncio
    async def test_window_is_clamped(self, registry):
        sheet = await create_sheet(registry, row_count=3, col_count=2)

        window = await get_sheet_window(registry, sheet["sheet_id"], 0, 5)

        assert len(window["rows"]) == 3
        assert window["end_row"] == 3

    @pytest.mark.asyncio
    async def test_inverted_window_is_rejected(self, registry, sheet_id):
        with pytest.raises(WindowRequestError) as exc_info:
            await get_sheet_window(registry, sheet_id, 10, 5)
        assert exc_info.value.error == "invalid_window"

    @pytest.mark.asyncio
    async def test_oversized_window_is_rejected(self, registry, sheet_id):
        with patch("sheetgrid.services.sheet_service.settings") as mock_settings:
            mock_settings.MAX_WINDOW_ROWS = 10

            with pytest.raises(WindowRequestError) as exc_info:
                await get_sheet_window(registry, sheet_id, 0, 11)

        assert exc_info.value.error == "window_too_large"

    @pytest.mark.asyncio
    async def test_wide_window_is_bounded_by_cells(self, registry):
        sheet = await create_sheet(registry, row_count=100000, col_count=16384)

        with pytest.raises(WindowRequestError) as exc_info:
            await get_sheet_window(registry, sheet["sheet_id"], 0, 1000)

        assert exc_info.value.error == "window_too_large"
        assert "cells" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_window_within_cell_limit(self, registry):
        sheet = await create_sheet(registry, row_count=100000, col_count=500)

        window = await get_sheet_window(registry, sheet["sheet_id"], 0, 1000)

        assert len(window["rows"]) == 1000
        assert len(window["rows"][0]) == 500


class TestCells:
    """Tests for get_cell_value() / update_cell() / paste_block()."""

    @pytest.mark.asyncio
    async def test_update_and_read(self, registry, sheet_id):
        result = await update_cell(registry, sheet_id, 42, 3, "hello")
        cell = await get_cell_value(registry, sheet_id, 42, 3)

        assert result["edit_count"] == 1
        assert result["label"] == "D43"
        assert cell["value"] == "hello"

    @pytest.mark.asyncio
    async def test_update_by_field_name(self, registry, sheet_id):
        result = await update_cell(registry, sheet_id, 0, "col_27", "x")
        assert result["col"] == 27
        assert result["label"] == "AB1"

    @pytest.mark.asyncio
    async def test_clearing_cell_drops_edit(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 1, 1, "x")
        result = await update_cell(registry, sheet_id, 1, 1, "")

        assert result["value"] == ""
        assert result["edit_count"] == 0

    @pytest.mark.asyncio
    async def test_paste_block(self, registry, sheet_id):
        result = await paste_block(registry, sheet_id, 5, 1, [["a", "b"], ["c", None]])

        assert result == {"cells_written": 4, "edit_count": 3}
        cell = await get_cell_value(registry, sheet_id, 6, 1)
        assert cell["value"] == "c"


class TestResizeSheet:
    """Tests for resize_sheet()."""

    @pytest.mark.asyncio
    async def test_shrink_and_grow_keeps_dormant_edit(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 50000, 0, "keep")

        shrunk = await resize_sheet(registry, sheet_id, 10, 10)
        assert shrunk["row_count"] == 10
        assert shrunk["dormant_edit_count"] == 1
        assert shrunk["generation"] == 1

        grown = await resize_sheet(registry, sheet_id, 100000, 10)
        assert grown["dormant_edit_count"] == 0

        window = await get_sheet_window(registry, sheet_id, 50000, 50001)
        assert window["rows"][0]["col_0"] == "keep"

    @pytest.mark.asyncio
    async def test_rejected_resize_keeps_size(self, registry, sheet_id):
        with pytest.raises(InvalidDimensions):
            await resize_sheet(registry, sheet_id, -1, 10)

        sheet = await get_sheet(registry, sheet_id)
        assert sheet["row_count"] == 100000
        assert sheet["col_count"] == 10
        assert sheet["generation"] == 0

    @pytest.mark.asyncio
    async def test_resize_rejects_too_many_columns(self, registry, sheet_id):
        with pytest.raises(InvalidDimensions):
            await resize_sheet(registry, sheet_id, 100000, 20000)

        sheet = await get_sheet(registry, sheet_id)
        assert sheet["col_count"] == 10
        assert sheet["generation"] == 0


class TestColumnsAndExport:
    """Tests for get_column_specs() / export_sheet_csv() / export_sheet_xlsx()."""

    @pytest.mark.asyncio
    async def test_column_specs(self, registry):
        sheet = await create_sheet(registry, row_count=1, col_count=27)

        columns = await get_column_specs(registry, sheet["sheet_id"])

        assert len(columns) == 27
        assert columns[26]["header_name"] == "AA"
        assert columns[26]["field"] == "col_26"

    @pytest.mark.asyncio
    async def test_export_csv_range(self, registry):
        sheet = await create_sheet(registry, row_count=5, col_count=3)
        await update_cell(registry, sheet["sheet_id"], 1, 2, "total, net")

        lines = await export_sheet_csv(registry, sheet["sheet_id"], 0, 10)

        rows = list(csv.reader(io.StringIO("".join(lines))))
        assert rows[0] == ["A", "B", "C"]
        assert len(rows) == 6
        assert rows[2] == ["", "", "total, net"]

    @pytest.mark.asyncio
    async def test_export_csv_covers_every_edited_row(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 3, 0, "first")
        await update_cell(registry, sheet_id, 50000, 9, "last")

        lines = await export_sheet_csv(registry, sheet_id)

        rows = list(csv.reader(io.StringIO("".join(lines))))
        assert len(rows) == 1 + 50001
        assert rows[4][0] == "first"
        assert rows[50001][9] == "last"

    @pytest.mark.asyncio
    async def test_export_csv_skips_dormant_edits(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 1, 0, "kept")
        await update_cell(registry, sheet_id, 900, 0, "dormant")
        await resize_sheet(registry, sheet_id, 100, 10)

        rows = list(csv.reader(io.StringIO("".join(await export_sheet_csv(registry, sheet_id)))))

        assert len(rows) == 3
        assert rows[2][0] == "kept"

    @pytest.mark.asyncio
    async def test_export_empty_sheet_is_header_only(self, registry, sheet_id):
        lines = list(await export_sheet_csv(registry, sheet_id))

        assert len(lines) == 1
        assert lines[0].startswith("A,B,C")

    @pytest.mark.asyncio
    async def test_export_rejects_inverted_range(self, registry, sheet_id):
        with pytest.raises(WindowRequestError) as exc_info:
            await export_sheet_csv(registry, sheet_id, 10, 5)
        assert exc_info.value.error == "invalid_window"

    @pytest.mark.asyncio
    async def test_export_xlsx(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 2, 1, "hello")

        content = await export_sheet_xlsx(registry, sheet_id)

        wb = load_workbook(io.BytesIO(content), read_only=True)
        rows = list(wb.active.iter_rows(values_only=True))
        wb.close()
        assert rows[0][:3] == ("A", "B", "C")
        assert len(rows) == 4
        assert rows[3][1] == "hello"


class TestImportWorkbook:
    """Tests for import_workbook()."""

    @pytest.mark.asyncio
    async def test_import_csv_at_offset(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 10, 3, "old")

        result = await import_workbook(
            registry, sheet_id, b"a,b\n,c\n", "csv", start_row=10, start_col=2
        )

        assert result["rows_imported"] == 2
        assert result["cells_written"] == 4
        assert (await get_cell_value(registry, sheet_id, 10, 2))["value"] == "a"
        assert (await get_cell_value(registry, sheet_id, 10, 3))["value"] == "b"
        assert (await get_cell_value(registry, sheet_id, 11, 2))["value"] == ""
        assert (await get_cell_value(registry, sheet_id, 11, 3))["value"] == "c"
        assert result["edit_count"] == 3

    @pytest.mark.asyncio
    async def test_import_grows_sheet(self, registry):
        sheet = await create_sheet(registry, row_count=2, col_count=2)

        result = await import_workbook(registry, sheet["sheet_id"], b"1,2,3\n4,5,6\n7,8,9\n", "csv")

        assert result["sheet"]["row_count"] == 3
        assert result["sheet"]["col_count"] == 3
        assert (await get_cell_value(registry, sheet["sheet_id"], 2, 2))["value"] == "9"

    @pytest.mark.asyncio
    async def test_import_never_shrinks(self, registry, sheet_id):
        result = await import_workbook(registry, sheet_id, b"x\n", "csv")

        assert result["sheet"]["row_count"] == 100000
        assert result["sheet"]["col_count"] == 10

    @pytest.mark.asyncio
    async def test_import_without_grow_keeps_size(self, registry):
        sheet = await create_sheet(registry, row_count=1, col_count=1)

        result = await import_workbook(registry, sheet["sheet_id"], b"a,b\n", "csv", grow=False)

        assert result["sheet"]["col_count"] == 1
        assert result["sheet"]["dormant_edit_count"] == 1

    @pytest.mark.asyncio
    async def test_import_replace_clears_existing_edits(self, registry, sheet_id):
        await update_cell(registry, sheet_id, 500, 5, "stale")

        result = await import_workbook(registry, sheet_id, b"fresh\n", "csv", replace=True)

        assert result["edit_count"] == 1
        assert (await get_cell_value(registry, sheet_id, 500, 5))["value"] == ""

    @pytest.mark.asyncio
    async def test_import_xlsx(self, registry, sheet_id):
        content = write_xlsx(["id", "name"], [["1", "Ada"], ["2", ""]])

        result = await import_workbook(registry, sheet_id, content, "xlsx")

        assert result["rows_imported"] == 3
        assert (await get_cell_value(registry, sheet_id, 0, 1))["value"] == "name"
        assert (await get_cell_value(registry, sheet_id, 1, 1))["value"] == "Ada"
        assert (await get_cell_value(registry, sheet_id, 2, 1))["value"] == ""

    @pytest.mark.asyncio
    async def test_import_too_wide_writes_nothing(self, registry, sheet_id):
        with pytest.raises(InvalidDimensions):
            await import_workbook(registry, sheet_id, b"x\n", "csv", start_col=20000)

        sheet = await get_sheet(registry, sheet_id)
        assert sheet["col_count"] == 10
        assert sheet["edit_count"] == 0

    @pytest.mark.asyncio
    async def test_import_malformed_xlsx(self, registry, sheet_id):
        with pytest.raises(WorkbookFormatError):
            await import_workbook(registry, sheet_id, b"not a zip", "xlsx")

    @pytest.mark.asyncio
    async def test_import_unknown_sheet(self, registry):
        with pytest.raises(SheetNotFoundError):
            await import_workbook(registry, "missing", b"x\n", "csv")

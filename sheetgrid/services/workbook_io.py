"""
Workbook file formats for sheet import and export.

Reads uploaded CSV/XLSX files into rows of strings and writes sheet rows back
out as CSV or XLSX. Every reader returns plain List[List[str]]; None cells
become "" so they clear the cells they land on when pasted into a grid.

RULES:
- Never log cell contents, only row/column counts and file sizes
- Malformed files raise WorkbookFormatError (mapped to 400 by the routes)
"""

import csv
import io
import logging
import zipfile
from typing import Any, Iterable, Iterator, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class WorkbookFormatError(ValueError):
    """Raised when an uploaded file cannot be read as a workbook."""


def detect_format(filename: Optional[str], content_type: Optional[str]) -> str:
    """
    Decide between "csv" and "xlsx" from the file name, then the content type.

    Raises:
        WorkbookFormatError: If neither identifies a supported format
    """
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return "csv"
    if name.endswith(".xlsx"):
        return "xlsx"

    if content_type == XLSX_MEDIA_TYPE:
        return "xlsx"
    if content_type in (CSV_MEDIA_TYPE, "application/csv", "text/plain"):
        return "csv"

    raise WorkbookFormatError("File must be a .csv or .xlsx workbook")


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def read_csv_rows(file_bytes: bytes) -> List[List[str]]:
    """
    Parse CSV bytes (UTF-8, optional BOM) into rows of strings.

    Raises:
        WorkbookFormatError: If the file is not UTF-8 text or not valid CSV
    """
    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise WorkbookFormatError("CSV file must be UTF-8 encoded")

    try:
        rows = [list(row) for row in csv.reader(io.StringIO(text))]
    except csv.Error as e:
        raise WorkbookFormatError(f"Malformed CSV: {e}")

    logger.debug(f"Parsed CSV: {len(rows)} rows")
    return rows


def read_xlsx_rows(file_bytes: bytes, sheet_name: Optional[str] = None) -> List[List[str]]:
    """
    Read one worksheet of an .xlsx workbook into rows of strings.

    Args:
        file_bytes: Uploaded workbook
        sheet_name: Worksheet to read (the active sheet when None)

    Raises:
        WorkbookFormatError: If the file is not an .xlsx workbook or the
            worksheet does not exist
    """
    try:
        wb = load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise WorkbookFormatError(f"Could not open workbook: {e}")

    try:
        if sheet_name is None:
            ws = wb.active
        elif sheet_name in wb.sheetnames:
            ws = wb[sheet_name]
        else:
            raise WorkbookFormatError(f'Sheet "{sheet_name}" not found in the uploaded file')

        rows = [
            [_cell_text(value) for value in row]
            for row in ws.iter_rows(values_only=True)
        ]
    finally:
        wb.close()

    logger.debug(f"Parsed XLSX: {len(rows)} rows")
    return rows


def iter_csv_lines(header: List[str], rows: Iterable[List[str]]) -> Iterator[str]:
    """Yield CSV text one line at a time: the header first, then each row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    for row in _with_header(header, rows):
        writer.writerow(row)
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)


def write_xlsx(header: List[str], rows: Iterable[List[str]], title: str = "Sheet1") -> bytes:
    """Write the header and rows into a single-sheet .xlsx workbook."""
    wb = Workbook(write_only=True)
    ws = wb.create_sheet(title=title)

    for row in _with_header(header, rows):
        # Empty cells stay empty in the workbook instead of holding ""
        ws.append([value if value else None for value in row])

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def _with_header(header: List[str], rows: Iterable[List[str]]) -> Iterator[List[str]]:
    yield header
    yield from rows

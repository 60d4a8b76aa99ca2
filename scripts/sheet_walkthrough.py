#!/usr/bin/env python3
"""
Sheet Walkthrough Script

Drives the sheet service in-process (no server, no HTTP) to show how a host
grid talks to a sheet: open, edit, request a window, shrink and grow back,
and export as CSV.

Usage:
    python scripts/sheet_walkthrough.py
    python scripts/sheet_walkthrough.py --rows 100000 --cols 10 --row 42 --col 3 --value hello
    python scripts/sheet_walkthrough.py --csv
"""

import argparse
import asyncio
import logging
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sheetgrid.grid import compute_column_label
from sheetgrid.services.sheet_service import (
    create_sheet,
    export_sheet_csv,
    get_sheet_window,
    resize_sheet,
    update_cell,
)
from sheetgrid.store import SheetRegistry


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def print_window(window: dict) -> None:
    """Pretty print a materialized window."""
    print("\n" + "=" * 60)
    print(
        f"WINDOW [{window['start_row']}, {window['end_row']}) of {window['total_row_count']} rows "
        f"(request #{window['request_id']}, generation {window['generation']})"
    )
    print("=" * 60)

    for offset, row in enumerate(window["rows"]):
        filled = {field: value for field, value in row.items() if value}
        print(f"  row {window['start_row'] + offset:>7}: {filled or '-'}")


async def run_walkthrough(rows: int, cols: int, row: int, col: int, value: str, show_csv: bool):
    """Run the walkthrough against a private registry."""
    registry = SheetRegistry()

    sheet = await create_sheet(registry, row_count=rows, col_count=cols)
    sheet_id = sheet["sheet_id"]
    print(f"\nOpened sheet {sheet_id} ({rows}x{cols})")

    await update_cell(registry, sheet_id, row, col, value)
    print(f"Set {compute_column_label(col)}{row + 1} = {value!r}")

    start = max(row - 2, 0)
    print_window(await get_sheet_window(registry, sheet_id, start, start + 5))

    shrunk = await resize_sheet(registry, sheet_id, max(row // 2, 1), cols)
    print(
        f"\nShrunk to {shrunk['row_count']} rows: "
        f"{shrunk['dormant_edit_count']} dormant edit(s) kept"
    )

    grown = await resize_sheet(registry, sheet_id, rows, cols)
    print(f"Grown back to {grown['row_count']} rows")
    print_window(await get_sheet_window(registry, sheet_id, start, start + 5))

    if show_csv:
        print("\nCSV export:\n")
        lines = await export_sheet_csv(registry, sheet_id, start, start + 5)
        print("".join(lines))

    registry.delete(sheet_id)


def main():
    parser = argparse.ArgumentParser(description="Walk through a sheet session in-process")
    parser.add_argument("--rows", type=int, default=100000, help="Sheet rows")
    parser.add_argument("--cols", type=int, default=10, help="Sheet columns")
    parser.add_argument("--row", type=int, default=42, help="Row of the edited cell")
    parser.add_argument("--col", type=int, default=3, help="Column of the edited cell")
    parser.add_argument("--value", default="hello", help="Value to write")
    parser.add_argument("--csv", action="store_true", help="Also print the window as CSV")
    args = parser.parse_args()

    asyncio.run(run_walkthrough(args.rows, args.cols, args.row, args.col, args.value, args.csv))


if __name__ == "__main__":
    main()

"""
SparseGrid core.

Presents a rows x columns sheet backed by memory proportional to the number
of edited cells. Only cells that hold a non-empty value are stored; every
other cell is implicitly the empty string.

CRITICAL RULES:
1. A key is present in the store if and only if its value is non-empty.
   Setting a cell to "" removes the key, it never stores "".
2. Reads and writes are total: out-of-range coordinates read as "" and
   writes are accepted regardless of the current dimensions.
3. Bounds are enforced only when a window is materialized.
4. resize() validates before mutating. A rejected resize leaves the
   dimensions untouched; an accepted one never purges stored edits.
"""

import asyncio
import logging
import math
from numbers import Integral, Real
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from sheetgrid.grid.types import (
    CellKey,
    ColumnSpec,
    GridDimensions,
    RowRecord,
    WindowResult,
)
from sheetgrid.utils.constants import (
    COLUMN_FIELD_PREFIX,
    COLUMN_LABEL_ALPHABET,
    EMPTY_CELL,
)

logger = logging.getLogger(__name__)


class InvalidDimensions(ValueError):
    """Raised when resize input is not a pair of finite positive integers."""

    def __init__(self, row_count: Any, col_count: Any, reason: Optional[str] = None):
        self.row_count = row_count
        self.col_count = col_count
        if reason is None:
            reason = "Rows and columns must be positive integers"
        super().__init__(f"{reason} (got rows={row_count!r}, cols={col_count!r})")


def compute_column_label(index: int) -> str:
    """
    Map a zero-based column index to its spreadsheet label.

    Bijective base-26: 0 -> "A", 25 -> "Z", 26 -> "AA", 701 -> "ZZ", 702 -> "AAA".

    Raises:
        ValueError: If index is negative
    """
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")

    letters: List[str] = []
    while index >= 0:
        letters.append(COLUMN_LABEL_ALPHABET[index % 26])
        index = index // 26 - 1

    return "".join(reversed(letters))


def column_field(index: int) -> str:
    """Row-record field name for a column index ("col_3")."""
    return f"{COLUMN_FIELD_PREFIX}{index}"


def parse_column_field(field: str) -> int:
    """
    Inverse of column_field().

    Raises:
        ValueError: If the field is not of the form "col_<non-negative int>"
    """
    if not field.startswith(COLUMN_FIELD_PREFIX):
        raise ValueError(f"Not a column field: {field!r}")

    suffix = field[len(COLUMN_FIELD_PREFIX):]
    if not suffix.isdigit():
        raise ValueError(f"Not a column field: {field!r}")

    return int(suffix)


def _coerce_dimension(value: Any) -> Optional[int]:
    """Return value as a positive int, or None when it is not acceptable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Integral):
        number = int(value)
    elif isinstance(value, Real):
        if not math.isfinite(value) or not float(value).is_integer():
            return None
        number = int(value)
    else:
        return None

    return number if number > 0 else None


class SparseGrid:
    """
    Sparse row x column cell space.

    Attributes:
        generation: Bumped on every accepted resize. Window data cached by a
            host against an older generation must be discarded.
    """

    def __init__(self, row_count: int, col_count: int):
        rows = _coerce_dimension(row_count)
        cols = _coerce_dimension(col_count)
        if rows is None or cols is None:
            raise InvalidDimensions(row_count, col_count)

        self._dimensions = GridDimensions(rows, cols)
        self._cells: Dict[CellKey, str] = {}
        self.generation = 0

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return (
            f"SparseGrid(rows={self.row_count}, cols={self.col_count}, "
            f"edits={len(self._cells)}, generation={self.generation})"
        )

    @property
    def dimensions(self) -> GridDimensions:
        return self._dimensions

    @property
    def row_count(self) -> int:
        return self._dimensions.row_count

    @property
    def col_count(self) -> int:
        return self._dimensions.col_count

    @property
    def edit_count(self) -> int:
        """Number of stored (non-empty) cells, dormant ones included."""
        return len(self._cells)

    @property
    def store(self) -> Mapping[CellKey, str]:
        """Read-only view of the cell store."""
        return MappingProxyType(self._cells)

    def get_cell(self, row: int, col: int) -> str:
        return self._cells.get((row, col), EMPTY_CELL)

    def set_cell(self, row: int, col: int, value: Optional[Any]) -> None:
        """
        Store a cell value, or remove the cell when the value is empty.

        None counts as empty. Non-string values are stored as str(value).
        """
        key = (row, col)
        text = EMPTY_CELL if value is None else str(value)

        if text == EMPTY_CELL:
            self._cells.pop(key, None)
        else:
            self._cells[key] = text

    def set_block(
        self,
        start_row: int,
        start_col: int,
        values: Iterable[Iterable[Optional[Any]]],
    ) -> int:
        """
        Paste a rectangular block anchored at (start_row, start_col).

        Rows may be ragged; each value goes through set_cell(), so empty
        values clear the cells they land on.

        Returns:
            Number of cells written (cleared cells included)
        """
        written = 0
        for row_offset, row_values in enumerate(values):
            for col_offset, value in enumerate(row_values):
                self.set_cell(start_row + row_offset, start_col + col_offset, value)
                written += 1
        return written

    def clear(self) -> None:
        self._cells.clear()

    def build_row(self, row: int, col_count: Optional[int] = None) -> RowRecord:
        if col_count is None:
            col_count = self.col_count
        return {column_field(col): self.get_cell(row, col) for col in range(col_count)}

    def materialize_window(
        self,
        start_row: int,
        end_row: int,
        col_count: Optional[int] = None,
    ) -> WindowResult:
        """
        Build the rows [start_row, min(end_row, row_count)).

        Rows past row_count are excluded, never padded. Each row carries
        col_count fields (the grid's own col_count when omitted).
        """
        total = self.row_count
        stop = min(end_row, total)
        rows = [self.build_row(row, col_count) for row in range(max(start_row, 0), stop)]
        return WindowResult(rows=rows, total_row_count=total)

    async def materialize_window_async(
        self,
        start_row: int,
        end_row: int,
        col_count: Optional[int] = None,
    ) -> WindowResult:
        """
        Same as materialize_window(), deferred to the next event-loop tick.

        Edits applied while this call is suspended may or may not show up
        in the result.
        """
        await asyncio.sleep(0)
        return self.materialize_window(start_row, end_row, col_count)

    def resize(self, new_row_count: Any, new_col_count: Any) -> GridDimensions:
        """
        Replace the grid dimensions.

        Edits outside the new bounds stay in the store (dormant) and become
        visible again if the grid grows back.

        Returns:
            The new dimensions

        Raises:
            InvalidDimensions: Input is not a pair of finite positive integers.
                The previous dimensions are kept.
        """
        rows = _coerce_dimension(new_row_count)
        cols = _coerce_dimension(new_col_count)
        if rows is None or cols is None:
            raise InvalidDimensions(new_row_count, new_col_count)

        previous = self._dimensions
        self._dimensions = GridDimensions(rows, cols)
        self.generation += 1

        logger.debug(
            f"Grid resized {previous.row_count}x{previous.col_count} -> {rows}x{cols} "
            f"(generation={self.generation})"
        )
        return self._dimensions

    def dormant_edit_count(self) -> int:
        """Stored cells that fall outside the current dimensions."""
        rows, cols = self._dimensions
        return sum(1 for row, col in self._cells if row >= rows or col >= cols)

    def stored_extent(self) -> GridDimensions:
        """
        Smallest top-left block holding every visible edit.

        Dormant edits are ignored. An empty grid has extent (0, 0).
        """
        rows, cols = self._dimensions
        last_row = last_col = -1
        for row, col in self._cells:
            if row < rows and col < cols:
                last_row = max(last_row, row)
                last_col = max(last_col, col)
        return GridDimensions(last_row + 1, last_col + 1)

    def iter_rows(self, start_row: int, end_row: int) -> Iterator[List[str]]:
        """
        Yield cell values row by row for [start_row, min(end_row, row_count)).

        Only one row is held at a time, so exports of the whole sheet stay
        O(col_count) in memory.
        """
        cols = self.col_count
        for row in range(max(start_row, 0), min(end_row, self.row_count)):
            yield [self.get_cell(row, col) for col in range(cols)]

    def column_specs(self) -> List[ColumnSpec]:
        return [
            ColumnSpec(
                index=index,
                field=column_field(index),
                header_name=compute_column_label(index),
                editable=True,
                resizable=True,
            )
            for index in range(self.col_count)
        ]

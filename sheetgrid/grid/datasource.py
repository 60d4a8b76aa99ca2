"""
Window data source for a virtualized host grid.

The host widget calls request() whenever its viewport scrolls or the grid
is resized, reports committed edits through on_edit(), and resizes through
resize(). Responses are tagged so the host can discard stale ones:

- request_id grows with every request; only the newest one is current.
- generation is the grid generation the rows were built against; a resize
  makes every earlier response stale.

In-flight materialization is never cancelled. A superseded response is
still returned; the caller checks is_stale() and drops it.
"""

import logging
from typing import Any, Optional, Union

from sheetgrid.grid.sparse_grid import InvalidDimensions, SparseGrid, parse_column_field
from sheetgrid.grid.types import WindowResponse

logger = logging.getLogger(__name__)


class GridDataSource:
    """Request/edit/resize contract between a SparseGrid and its host UI."""

    def __init__(self, grid: SparseGrid):
        self.grid = grid
        self._last_request_id = 0

    @property
    def last_request_id(self) -> int:
        return self._last_request_id

    async def request(self, start_row: int, end_row: int) -> WindowResponse:
        """
        Materialize rows [start_row, end_row) for the host viewport.

        Returns:
            WindowResponse with the rows, the authoritative row count, the
            request sequence number and the grid generation used
        """
        self._last_request_id += 1
        request_id = self._last_request_id
        generation = self.grid.generation

        window = await self.grid.materialize_window_async(start_row, end_row)

        logger.debug(
            f"Window request #{request_id} [{start_row}, {end_row}) -> "
            f"{len(window.rows)} rows of {window.total_row_count}"
        )

        # A window past the end reports the empty range [total, total)
        first_row = max(min(start_row, window.total_row_count), 0)

        return WindowResponse(
            request_id=request_id,
            generation=generation,
            start_row=first_row,
            end_row=first_row + len(window.rows),
            rows=window.rows,
            total_row_count=window.total_row_count,
        )

    def is_stale(self, response: WindowResponse) -> bool:
        """True when a newer request was issued or the grid was resized since."""
        return (
            response.request_id != self._last_request_id
            or response.generation != self.grid.generation
        )

    def on_edit(self, row: int, col: Union[int, str], new_value: Optional[Any]) -> None:
        """
        Apply a committed cell edit.

        Args:
            row: Row index of the edited cell
            col: Column index, or the "col_<i>" field name the widget reports
            new_value: New cell value; None or "" clears the cell

        Raises:
            ValueError: If col is a string that is not a column field name
        """
        col_index = parse_column_field(col) if isinstance(col, str) else col
        self.grid.set_cell(row, col_index, new_value)

    def resize(self, new_row_count: Any, new_col_count: Any) -> bool:
        """
        Resize the grid.

        Returns:
            True if the resize was accepted, False if it was rejected (the
            grid keeps its previous dimensions)
        """
        try:
            self.grid.resize(new_row_count, new_col_count)
        except InvalidDimensions as e:
            logger.warning(f"Resize rejected: {e}")
            return False

        logger.info(
            f"Resize accepted: {self.grid.row_count}x{self.grid.col_count} "
            f"(generation={self.grid.generation})"
        )
        return True

"""
In-process sheet registry.

Owns every open sheet session. One session wraps one SparseGrid and its
GridDataSource; the session (and with it the whole cell store) is discarded
when the sheet is deleted or the process exits.

RULES:
1. Sessions are never persisted. Persisting cell data is the host's job.
2. A session has a single logical owner; there is no locking because all
   access happens on the event loop thread.
3. Unknown sheet ids raise SheetNotFoundError, never return None.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sheetgrid.grid import GridDataSource, SparseGrid

logger = logging.getLogger(__name__)


class SheetNotFoundError(LookupError):
    """Raised when a sheet id does not match an open session."""

    def __init__(self, sheet_id: str):
        self.sheet_id = sheet_id
        super().__init__(f"Sheet {sheet_id} not found")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SheetSession:
    """
    One open sheet.

    Attributes:
        sheet_id: UUID of the session
        grid: The sparse cell store and dimensions
        source: Window data source bound to grid
        created_at: ISO-8601 UTC creation timestamp
    """
    sheet_id: str
    grid: SparseGrid
    source: GridDataSource
    created_at: str = field(default_factory=_utc_now_iso)


class SheetRegistry:
    """Maps sheet ids to open sessions."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SheetSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sheet_id: object) -> bool:
        return sheet_id in self._sessions

    def create(self, row_count: int, col_count: int) -> SheetSession:
        """
        Open a new sheet.

        Raises:
            InvalidDimensions: If row_count/col_count are not positive integers
        """
        grid = SparseGrid(row_count, col_count)
        session = SheetSession(
            sheet_id=str(uuid.uuid4()),
            grid=grid,
            source=GridDataSource(grid),
        )
        self._sessions[session.sheet_id] = session

        logger.info(f"Sheet {session.sheet_id} opened ({row_count}x{col_count})")
        return session

    def get(self, sheet_id: str) -> SheetSession:
        session = self._sessions.get(sheet_id)
        if session is None:
            raise SheetNotFoundError(sheet_id)
        return session

    def delete(self, sheet_id: str) -> bool:
        """
        Tear a sheet down, discarding its cell store.

        Returns:
            True if a session was removed, False if the id was unknown
        """
        session: Optional[SheetSession] = self._sessions.pop(sheet_id, None)
        if session is None:
            return False

        edits = session.grid.edit_count
        session.grid.clear()
        logger.info(f"Sheet {sheet_id} closed ({edits} edits discarded)")
        return True

    def list(self) -> List[SheetSession]:
        """Open sessions, oldest first."""
        return list(self._sessions.values())

    def clear(self) -> None:
        for sheet_id in list(self._sessions):
            self.delete(sheet_id)


_registry: Optional[SheetRegistry] = None


def get_sheet_registry() -> SheetRegistry:
    """
    Return the process-wide registry, creating it on first use.

    Used as a FastAPI dependency; tests override it with a fresh registry
    through app.dependency_overrides.
    """
    global _registry

    if _registry is None:
        logger.info("Initializing sheet registry")
        _registry = SheetRegistry()

    return _registry

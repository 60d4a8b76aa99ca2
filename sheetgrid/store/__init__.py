"""
In-memory session store for open sheets.
"""

from .registry import (
    SheetNotFoundError,
    SheetRegistry,
    SheetSession,
    get_sheet_registry,
)

__all__ = [
    "SheetNotFoundError",
    "SheetRegistry",
    "SheetSession",
    "get_sheet_registry",
]

"""
Health check route for the SheetGrid service.

This endpoint is PUBLIC and provides a simple status check for load
balancers, monitoring, and deployment verification.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from sheetgrid.schemas.health import HealthResponse
from sheetgrid.store import SheetRegistry, get_sheet_registry
from sheetgrid.utils.logging import get_logger

logger = get_logger(__name__)

# Create router with no prefix (mounted at root level in main.py)
router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint. "
        "Returns a simple status indicator and the number of open sheets."
    ),
    status_code=200,
)
async def health_check(
    registry: Annotated[SheetRegistry, Depends(get_sheet_registry)]
) -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "status": "ok",
            "service": "sheetgrid",
            "open_sheets": 0
        }
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok", service="sheetgrid", open_sheets=len(registry))

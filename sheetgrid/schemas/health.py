"""
Health check endpoint schemas.

The health endpoint is PUBLIC and returns a simple status indicator plus
the number of open sheets.
"""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health endpoint.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "service": "sheetgrid",
                "open_sheets": 2
            }
        }
    )

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    service: str = Field(default="sheetgrid", description="Service name")
    open_sheets: int = Field(default=0, description="Number of sheets currently open")

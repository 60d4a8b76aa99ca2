"""
FastAPI routers for all API endpoints.

Each module defines a router for a specific concern (sheets, health).
"""

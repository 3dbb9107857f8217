"""
API Package

Contains FastAPI routers for:
- airbyte_api: workspace, connection and job endpoints
- export_api: /export/trigger endpoint
- monitoring_api: /status endpoint for client state
"""

__all__ = ["airbyte_api", "export_api", "monitoring_api"]

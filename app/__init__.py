"""
Airbyte Sync Service Package

This package contains the core components of the Airbyte sync service:
- core: Configuration, logging, and error types
- services: Token management, Airbyte client, tabular mapping and export
- models: Pydantic models for Airbyte resources and API schemas
- api: FastAPI routers for Airbyte, export and monitoring endpoints
"""

__version__ = "1.0.0"
__all__ = ["core", "services", "models", "api"]

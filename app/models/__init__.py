"""
Models Package

Contains Pydantic data models for:
- airbyte: Token reply and Airbyte resource schemas
- api_models: API request/response models
"""

__all__ = ["airbyte", "api_models"]

"""
Core Infrastructure Package

Contains shared infrastructure components:
- config: Application configuration and settings
- logging: Structured JSON logging utilities
- exceptions: Typed errors raised by the Airbyte client and rendered by the API
"""

__all__ = ["config", "logging", "exceptions"]

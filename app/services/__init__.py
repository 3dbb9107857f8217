"""
Services Package

Contains business logic services:
- token_manager: OAuth client-credentials token caching and refresh
- airbyte_client: Airbyte API client with retries, re-authentication and pagination
- tabular: Listing-to-DataFrame mapping
- export_service: Export pipeline: fetch, tabulate, write
"""
__all__ = ["token_manager", "airbyte_client", "tabular", "export_service"]

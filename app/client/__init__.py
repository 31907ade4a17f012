"""
Async Python client for the marketplace API.
"""

from .session import Session
from .client import MarketplaceClient, ApiClientError, error_message

__all__ = ["Session", "MarketplaceClient", "ApiClientError", "error_message"]

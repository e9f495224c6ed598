"""
Exception hierarchy for the arbitrage monitor.

Provides specific exception types for each failure category so the runner
can decide whether a failure skips a tick or aborts startup.
"""

from typing import Any, Dict, Optional


class ArbMonitorError(Exception):
    """Base exception for all arbitrage monitor errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ArbMonitorError):
    """Raised when there are configuration-related issues."""

    pass


class NetworkError(ArbMonitorError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class QuoteError(NetworkError):
    """Raised when a venue cannot produce a quote (unreachable, empty or malformed)."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        router: Optional[str] = None,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, endpoint=endpoint, details=details)
        self.venue = venue
        self.router = router


class StorageError(ArbMonitorError):
    """Raised when persisting or reading opportunities fails."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.path = path

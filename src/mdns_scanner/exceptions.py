"""
Custom exceptions for the mDNS scanner.
"""
from typing import Optional


class MDNSScannerError(Exception):
    """Base class for all mDNS scanner errors."""
    pass

class SessionOpenError(MDNSScannerError):
    """Raised when a discovery session cannot be opened for a query
    (invalid service type, no usable network interface, ...)."""
    def __init__(self, query: str, message: str):
        super().__init__(f"Cannot start discovery for '{query}': {message}")
        self.query = query
        self.reason = message

class ResponseError(MDNSScannerError):
    """Raised for a single malformed discovery response. The scan skips it and keeps listening."""
    def __init__(self, message: str, record_name: Optional[str] = None):
        super().__init__(message)
        self.record_name = record_name

class CancellationTimeoutError(MDNSScannerError):
    """Raised when a scan task does not finish within the bound after being cancelled.
    This is a programming error, not a user-facing condition."""
    def __init__(self, query: str, timeout: float):
        super().__init__(f"Scan for '{query}' did not stop within {timeout}s of cancellation")
        self.query = query
        self.timeout = timeout

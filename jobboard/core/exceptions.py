"""
Custom exception classes for the application
"""
from typing import Optional, Dict, Any


class JobBoardException(Exception):
    """Base exception for the jobs API"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class MethodNotAllowedError(JobBoardException):
    """Unsupported HTTP method on a read-only route"""

    def __init__(self, message: str = "Method not allowed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=405, details=details)


class DatabaseUnavailableError(JobBoardException):
    """Relational store could not answer; details stay server-side"""

    def __init__(self, message: str = "Internal Server Error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)

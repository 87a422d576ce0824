"""
Exceptions raised by the Checkeeper client.
"""

from typing import Any, Dict, Optional


class CheckeeperError(Exception):
    """Base exception for Checkeeper client errors"""
    pass


class SignatureError(CheckeeperError):
    """Raised when a request signature cannot be computed from the given inputs"""
    pass


class ConfigurationError(CheckeeperError):
    """Raised when the client is missing its token or secret"""
    pass


class APIError(CheckeeperError):
    """Raised when the transport fails or the API returns an undecodable response"""
    def __init__(self, message: str, status_code: int, response: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response

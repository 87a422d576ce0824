"""Checkeeper API client with request signing"""

from .client import CheckeeperClient, Configuration
from .errors import APIError, CheckeeperError, ConfigurationError, SignatureError
from .types import InvoiceTable, MailCheckOptions, CreateCheckOptions, NameAddress
from .utils import (
    base64_to_bytes,
    base64_to_stream,
    canonical_string,
    get_request_signature,
    sign_request,
    verify_request_signature,
)

__version__ = "0.1.0"

__all__ = [
    "CheckeeperClient",
    "Configuration",
    "APIError",
    "CheckeeperError",
    "ConfigurationError",
    "SignatureError",
    "InvoiceTable",
    "MailCheckOptions",
    "CreateCheckOptions",
    "NameAddress",
    "base64_to_bytes",
    "base64_to_stream",
    "canonical_string",
    "get_request_signature",
    "sign_request",
    "verify_request_signature",
]

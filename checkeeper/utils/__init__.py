"""Utilities for canonical form, signing and wire conversions."""

from .canonical_form import canonical_string, encode_component, flatten_pairs, value_kind
from .signing import (
    attach_signature,
    get_request_signature,
    sign_request,
    sign_string,
    verify_request_signature,
)
from .binary import base64_to_bytes, base64_to_stream, binary_data_to_base64
from .timestamps import to_checkeeper_boolean, to_eastern_time

__all__ = [
    "canonical_string",
    "encode_component",
    "flatten_pairs",
    "value_kind",
    "attach_signature",
    "get_request_signature",
    "sign_request",
    "sign_string",
    "verify_request_signature",
    "base64_to_bytes",
    "base64_to_stream",
    "binary_data_to_base64",
    "to_checkeeper_boolean",
    "to_eastern_time",
]

"""
Conversions between binary attachments and the base64 strings Checkeeper uses.
"""

import base64
import io
from typing import BinaryIO

from ..types import Base64String, BinaryDataInput


def binary_data_to_base64(data: BinaryDataInput) -> Base64String:
    """
    Convert binary input to base64.

    A str is assumed to already be base64 and is returned untouched. bytes
    are encoded directly and a binary stream is read to the end first.

    Raises:
        TypeError: If data is none of the above
    """
    if isinstance(data, str):
        return data

    if isinstance(data, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(data)).decode("ascii")

    if hasattr(data, "read"):
        content = data.read()
        if not isinstance(content, (bytes, bytearray)):
            raise TypeError("Stream must be opened in binary mode")
        return base64.b64encode(bytes(content)).decode("ascii")

    raise TypeError(f"Unsupported binary data type: {type(data).__name__}")


def base64_to_bytes(encoded: Base64String) -> bytes:
    """Decode a base64 string (e.g. a returned pdf or image) to bytes."""
    return base64.b64decode(encoded)


def base64_to_stream(encoded: Base64String) -> BinaryIO:
    """Decode a base64 string into an in-memory binary stream."""
    return io.BytesIO(base64_to_bytes(encoded))

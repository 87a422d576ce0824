"""
Checkeeper request signing utilities (HMAC-SHA256).

A signature is computed over the canonical form of the complete request,
token included and signature excluded, and travels in the request body as
the "signature" field.
"""

import base64
import hashlib
import hmac
from typing import Any, Dict, Mapping

from ..errors import SignatureError
from .canonical_form import canonical_string

SIGNATURE_FIELD = "signature"
TOKEN_FIELD = "token"


def sign_string(canonical: str, secret: str) -> str:
    """
    Sign a canonical string with the shared secret.

    Process:
    1. UTF-8 encode the canonical string and the secret
    2. HMAC-SHA256 the string keyed by the secret
    3. Return base64-encoded digest (standard alphabet, padded)

    Args:
        canonical: Output of canonical_string()
        secret: Checkeeper secret key

    Returns:
        Base64-encoded HMAC signature

    Raises:
        SignatureError: If either argument is not a str
    """
    if not isinstance(secret, str):
        raise SignatureError(f"Secret must be a string, got {type(secret).__name__}")
    if not isinstance(canonical, str):
        raise SignatureError(f"Canonical string must be a string, got {type(canonical).__name__}")

    sig = hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(sig).decode("utf-8")


def get_request_signature(request: Mapping[str, Any], secret: str) -> str:
    """
    Compute the signature for a Checkeeper request.

    The request must already contain the token and must not contain a
    "signature" field; neither condition is checked here.

    Args:
        request: Complete request dictionary
        secret: Checkeeper secret key

    Returns:
        Base64-encoded HMAC signature
    """
    return sign_string(canonical_string(request), secret)


# Name used by callers that treat signing as a single external operation
sign_request = get_request_signature


def attach_signature(request: Mapping[str, Any], token: str, secret: str) -> Dict[str, Any]:
    """
    Return a copy of the request ready to send: token merged in, then signed.

    The token is part of the signed payload, so it is added before the
    signature is computed.
    """
    signed = {k: v for k, v in request.items() if k != SIGNATURE_FIELD}
    signed[TOKEN_FIELD] = token
    signed[SIGNATURE_FIELD] = get_request_signature(signed, secret)
    return signed


def verify_request_signature(request: Mapping[str, Any], secret: str) -> bool:
    """
    Verify the "signature" field of a signed request.

    Args:
        request: Request dictionary with "signature" field
        secret: Checkeeper secret key

    Returns:
        True if the signature matches the rest of the request, False otherwise

    Raises:
        SignatureError: If the secret is not a str
    """
    sig = request.get(SIGNATURE_FIELD)
    if not isinstance(sig, str) or not sig:
        return False

    unsigned = {k: v for k, v in request.items() if k != SIGNATURE_FIELD}
    expected = get_request_signature(unsigned, secret)

    # Constant-time comparison
    return hmac.compare_digest(expected.encode("utf-8"), sig.encode("utf-8"))

"""
HTTP client for the Checkeeper check printing and mailing API.

Usage:
    from checkeeper import CheckeeperClient, Configuration

    client = CheckeeperClient(Configuration(token="your-token", secret="your-secret"))
    status = client.get_check_status("chk_123")
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

import requests

from .errors import APIError, ConfigurationError
from .types import (
    CancelCheckResponse,
    CheckeeperErrorResponse,
    CheckIDRequest,
    CreateCheckOptions,
    CreateCheckPDFResult,
    CreateCheckRequest,
    GetCheckImageResponse,
    GetCheckStatusResponse,
    ISO8601Instant,
    ListChecksRequest,
    ListChecksResponse,
    MailCheckOptions,
    MailCheckResult,
    NameAddress,
)
from .utils.binary import binary_data_to_base64
from .utils.signing import attach_signature
from .utils.timestamps import to_checkeeper_boolean, to_eastern_time

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://my.checkeeper.com/api/v2"
USER_AGENT = "checkeeper-python/0.1.0"
REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": USER_AGENT
}


@dataclass
class Configuration:
    """
    Client configuration.

    Args:
        token: Checkeeper API token, sent with every request
        secret: Checkeeper secret key used to sign requests
        base_url: API base URL
        test_mode: Send every create request as a test, whatever the call asks for
        timeout: HTTP timeout (seconds)
        session: requests.Session to use instead of a client-owned one; its
            headers are left untouched
    """
    token: str
    secret: str
    base_url: str = DEFAULT_BASE_URL
    test_mode: bool = False
    timeout: float = 30
    session: Optional[requests.Session] = None

    @classmethod
    def from_env(cls, **overrides) -> "Configuration":
        """
        Build a configuration from CHECKEEPER_* environment variables.

        Reads CHECKEEPER_TOKEN, CHECKEEPER_SECRET, CHECKEEPER_BASE_URL,
        CHECKEEPER_TEST_MODE and CHECKEEPER_TIMEOUT. Keyword overrides win.
        """
        values: Dict[str, Any] = {
            "token": os.getenv("CHECKEEPER_TOKEN"),
            "secret": os.getenv("CHECKEEPER_SECRET"),
            "base_url": os.getenv("CHECKEEPER_BASE_URL", DEFAULT_BASE_URL),
            "test_mode": os.getenv("CHECKEEPER_TEST_MODE", "").strip().lower() in ("1", "true", "yes", "on"),
        }

        timeout = os.getenv("CHECKEEPER_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigurationError(f"Invalid CHECKEEPER_TIMEOUT: {timeout!r}")

        values.update(overrides)

        if not values["token"]:
            raise ConfigurationError("CHECKEEPER_TOKEN is not set")
        if not values["secret"]:
            raise ConfigurationError("CHECKEEPER_SECRET is not set")

        return cls(**values)


class CheckeeperClient:
    """
    Client for the Checkeeper API.

    Every request is POSTed as JSON after the token is merged in and the
    signature is computed over the result. Responses are returned as
    decoded JSON, either the typed success response or a
    CheckeeperErrorResponse ({"success": False, ...}).
    """

    def __init__(self, config: Configuration):
        if not config.token:
            raise ConfigurationError("Checkeeper token not configured")
        if not config.secret:
            raise ConfigurationError("Checkeeper secret not configured")

        self._token = config.token
        self._secret = config.secret
        self.base_url = (config.base_url or DEFAULT_BASE_URL).rstrip('/')
        self.test_mode = bool(config.test_mode)
        self.timeout = config.timeout

        self._owns_session = config.session is None
        self.session = config.session if config.session is not None else requests.Session()

    def list_checks(
        self,
        start: Union[datetime, ISO8601Instant],
        end: Union[datetime, ISO8601Instant]
    ) -> Union[ListChecksResponse, CheckeeperErrorResponse]:
        """
        List checks created between two instants.

        Checkeeper returns both test and production checks.
        """
        request: ListChecksRequest = {
            "start_date": to_eastern_time(start),
            "end_date": to_eastern_time(end),
        }
        return self._post("/check/list", request)

    def get_check_image(self, check_id: str) -> Union[GetCheckImageResponse, CheckeeperErrorResponse]:
        """Return an image of a check (JPG, even when the check was created as a PDF)."""
        request: CheckIDRequest = {"check_id": check_id}
        return self._post("/check/image", request)

    def cancel_check(self, check_id: str) -> Union[CancelCheckResponse, CheckeeperErrorResponse]:
        request: CheckIDRequest = {"check_id": check_id}
        return self._post("/check/cancel", request)

    def get_check_status(self, check_id: str) -> Union[GetCheckStatusResponse, CheckeeperErrorResponse]:
        request: CheckIDRequest = {"check_id": check_id}
        return self._post("/check/status", request)

    def mail_check(self, options: MailCheckOptions) -> MailCheckResult:
        """Create a check to be printed and mailed by Checkeeper."""
        return self._post("/check/create", self.build_create_request(options, return_pdf=False))

    def create_check_pdf(self, options: CreateCheckOptions) -> CreateCheckPDFResult:
        """Create a check PDF. The check is not mailed."""
        return self._post("/check/create", self.build_create_request(options, return_pdf=True))

    def build_create_request(self, options: CreateCheckOptions, return_pdf: bool) -> CreateCheckRequest:
        """
        Translate create options into Checkeeper's wire format.

        Optional fields that were not given are left out of the request.
        """
        mail_method = getattr(options, "mail_method", None)
        mail_address = getattr(options, "mail_address", None)
        attachment = getattr(options, "attachment", None)

        payer = _payer_payee_address(options.payer)
        payer.update({
            "logo": _optional_base64(options.logo),
            "signer": options.signer,
            "signer_image": _optional_base64(options.signer_image),
        })

        request: CreateCheckRequest = {
            "test": to_checkeeper_boolean(self.test_mode or options.test),
            "amount": options.amount,
            "date": options.date,
            "check_number": options.check_number,
            "bank_account": options.bank_account,
            "bank_routing": options.bank_routing,
            "memo": options.memo,
            "payer": payer,
            "payee": _payer_payee_address(options.payee),
            "note": options.note,
            "mail_method": mail_method,
            "mail_address": _mail_address(mail_address) if mail_address else None,
            "return_pdf": to_checkeeper_boolean(return_pdf),
            "template": options.template,
            "attachment": _optional_base64(attachment),
            "invoice_table": options.invoice_table.to_wire() if options.invoice_table else None,
        }
        return _prune_none(request)

    def _post(self, path: str, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sign and send a request, returning the decoded JSON response.

        Raises:
            APIError: On transport failure or a response that is not JSON
        """
        body = attach_signature(request, self._token, self._secret)
        url = f"{self.base_url}{path}"

        logger.debug(f"POST {path}")
        try:
            response = self.session.post(url, json=body, headers=REQUEST_HEADERS, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {path} failed: {e}")
            raise APIError(f"Request failed: {e}", status_code=0) from e

        logger.info(f"POST {path} -> {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Non-JSON response from {path} (status={response.status_code})")
            raise APIError(
                f"Invalid JSON response: {response.status_code}",
                status_code=response.status_code
            ) from e

        if isinstance(payload, dict) and payload.get("success") is False:
            logger.warning(f"Checkeeper rejected {path}: {payload.get('message')}")

        return payload

    def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _prune_none(value):
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    return value


def _optional_base64(data) -> Optional[str]:
    return binary_data_to_base64(data) if data is not None else None


def _payer_payee_address(party: NameAddress) -> Dict[str, Any]:
    return {
        "name": party.name,
        "address": {
            "line1": party.address_line1,
            "line2": party.address_line2,
        },
        "city": party.city,
        "state": party.state,
        "zip": party.zip,
        "country": party.country,
    }


def _mail_address(address: NameAddress) -> Dict[str, Any]:
    # Flat lines and no country, unlike payer/payee
    return {
        "name": address.name,
        "line1": address.address_line1,
        "line2": address.address_line2,
        "city": address.city,
        "state": address.state,
        "zip": address.zip,
    }

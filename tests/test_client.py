"""
Unit tests for the Checkeeper HTTP client.

HTTP is stubbed: the client is given a requests.Session whose post() is a
mock, so no test touches the network.
"""

import base64
import io
from unittest import mock

import pytest
import requests

from checkeeper import (
    APIError,
    CheckeeperClient,
    Configuration,
    ConfigurationError,
    CreateCheckOptions,
    InvoiceTable,
    MailCheckOptions,
    NameAddress,
)
from checkeeper.utils import canonical_string, verify_request_signature

TOKEN = "anytoken"
SECRET = "secret"


def make_response(status_code=200, json_data=None, text=None):
    response = mock.Mock()
    response.status_code = status_code
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    return response


@pytest.fixture
def session():
    s = requests.Session()
    s.post = mock.Mock(return_value=make_response(json_data={"success": True, "message": "ok"}))
    return s


@pytest.fixture
def client(session):
    return CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, session=session))


def sent_body(session):
    """Return the JSON body of the last POST."""
    return session.post.call_args.kwargs["json"]


def sent_url(session):
    return session.post.call_args.args[0]


@pytest.fixture
def payer():
    return NameAddress(
        name="Widgets Inc.",
        address_line1="827 Random Street",
        address_line2="Suite 102",
        city="Anytown",
        state="NY",
        zip="14850",
    )


@pytest.fixture
def payee():
    return NameAddress(
        name="Bob Smith",
        address_line1="114 Project Lane",
        city="Tinkertown",
        state="CA",
        zip="90210",
        country="US",
    )


class TestConfiguration:
    """Test client configuration."""

    def test_defaults(self, session):
        client = CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, session=session))

        assert client.base_url == "https://my.checkeeper.com/api/v2"
        assert client.test_mode is False
        assert client.timeout == 30

    def test_base_url_trailing_slash_stripped(self, session):
        config = Configuration(token=TOKEN, secret=SECRET, base_url="http://localhost:8080/api/", session=session)

        client = CheckeeperClient(config)
        client.cancel_check("chk_1")

        assert sent_url(session) == "http://localhost:8080/api/check/cancel"

    def test_missing_token_rejected(self):
        with pytest.raises(ConfigurationError, match="token"):
            CheckeeperClient(Configuration(token="", secret=SECRET))

    def test_missing_secret_rejected(self):
        with pytest.raises(ConfigurationError, match="secret"):
            CheckeeperClient(Configuration(token=TOKEN, secret=""))

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CHECKEEPER_TOKEN", "env-token")
        monkeypatch.setenv("CHECKEEPER_SECRET", "env-secret")
        monkeypatch.setenv("CHECKEEPER_TEST_MODE", "true")
        monkeypatch.setenv("CHECKEEPER_TIMEOUT", "5")
        monkeypatch.delenv("CHECKEEPER_BASE_URL", raising=False)

        config = Configuration.from_env()

        assert config.token == "env-token"
        assert config.secret == "env-secret"
        assert config.test_mode is True
        assert config.timeout == 5.0
        assert config.base_url == "https://my.checkeeper.com/api/v2"

    def test_from_env_missing_secret(self, monkeypatch):
        monkeypatch.setenv("CHECKEEPER_TOKEN", "env-token")
        monkeypatch.delenv("CHECKEEPER_SECRET", raising=False)

        with pytest.raises(ConfigurationError, match="CHECKEEPER_SECRET"):
            Configuration.from_env()

    def test_from_env_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("CHECKEEPER_TOKEN", "env-token")
        monkeypatch.setenv("CHECKEEPER_SECRET", "env-secret")
        monkeypatch.setenv("CHECKEEPER_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="CHECKEEPER_TIMEOUT"):
            Configuration.from_env()

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.delenv("CHECKEEPER_TOKEN", raising=False)
        monkeypatch.delenv("CHECKEEPER_SECRET", raising=False)

        config = Configuration.from_env(token="t", secret="s")

        assert (config.token, config.secret) == ("t", "s")

    def test_close_leaves_shared_session_open(self, session):
        session.close = mock.Mock()

        with CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, session=session)):
            pass

        session.close.assert_not_called()

    def test_close_closes_owned_session(self):
        """A client that created its own session closes it on exit."""
        with CheckeeperClient(Configuration(token=TOKEN, secret=SECRET)) as client:
            client.session.close = mock.Mock()

        client.session.close.assert_called_once_with()


class TestSignedRequests:
    """Test that every request is signed over its final payload."""

    def test_request_carries_token_and_valid_signature(self, client, session):
        client.get_check_status("chk_123")

        body = sent_body(session)

        assert body["check_id"] == "chk_123"
        assert body["token"] == TOKEN
        assert verify_request_signature(body, SECRET) is True

    @pytest.mark.parametrize("method,path", [
        ("get_check_status", "/check/status"),
        ("get_check_image", "/check/image"),
        ("cancel_check", "/check/cancel"),
    ])
    def test_check_id_endpoints(self, client, session, method, path):
        getattr(client, method)("chk_9")

        assert sent_url(session) == f"https://my.checkeeper.com/api/v2{path}"
        assert sent_body(session)["check_id"] == "chk_9"

    def test_timeout_passed_to_transport(self, session):
        client = CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, timeout=7, session=session))

        client.cancel_check("chk_1")

        assert session.post.call_args.kwargs["timeout"] == 7

    def test_json_headers_sent_per_request(self, client, session):
        client.cancel_check("chk_1")

        headers = session.post.call_args.kwargs["headers"]
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"].startswith("checkeeper-python/")

    def test_shared_session_headers_untouched(self, session):
        before = dict(session.headers)

        client = CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, session=session))
        client.cancel_check("chk_1")

        assert dict(session.headers) == before

    def test_list_checks_converts_to_eastern_time(self, client, session):
        client.list_checks("2023-01-19T19:00:00Z", "2023-07-01T03:30:00Z")

        body = sent_body(session)

        assert sent_url(session).endswith("/check/list")
        assert body["start_date"] == "2023-01-19 14:00:00"
        assert body["end_date"] == "2023-06-30 23:30:00"
        assert verify_request_signature(body, SECRET) is True


class TestCreateCheck:
    """Test translation of create options into the wire format."""

    def test_mail_check_wire_format(self, client, session, payer, payee):
        options = MailCheckOptions(
            amount="299235",
            check_number="50006",
            bank_routing="012345678",
            bank_account="9320122",
            payer=payer,
            payee=payee,
            date="2020-06-14",
            memo="Invoice 30093",
            signer="Knollback Reynyrard",
            mail_method="first_class",
            mail_address=NameAddress(
                name="Karen in Accounting",
                address_line1="101 North Main Street",
                city="Charleston",
                state="SC",
                zip="29601",
                country="US",
            ),
            invoice_table=InvoiceTable(
                headings=["Invoice", "Date", "Amount"],
                rows=[["30093", "2020-06-14", "$75.00"]],
            ),
        )

        client.mail_check(options)
        body = sent_body(session)

        assert sent_url(session).endswith("/check/create")
        assert body["return_pdf"] == "0"
        assert body["test"] == "0"
        assert body["check_number"] == "50006"
        assert body["bank_routing"] == "012345678"
        assert body["bank_account"] == "9320122"
        assert body["mail_method"] == "first_class"
        assert body["payer"]["address"] == {"line1": "827 Random Street", "line2": "Suite 102"}
        assert body["payer"]["signer"] == "Knollback Reynyrard"
        assert body["payee"]["country"] == "US"
        # Mail address is flat and has no country
        assert body["mail_address"] == {
            "name": "Karen in Accounting",
            "line1": "101 North Main Street",
            "city": "Charleston",
            "state": "SC",
            "zip": "29601",
        }
        assert body["invoice_table"]["rows"] == [["30093", "2020-06-14", "$75.00"]]
        assert verify_request_signature(body, SECRET) is True

    def test_create_check_pdf_requests_pdf(self, client, session, payer, payee):
        options = CreateCheckOptions(
            amount="10", check_number="1", bank_routing="012345678",
            bank_account="1", payer=payer, payee=payee,
        )

        client.create_check_pdf(options)

        assert sent_body(session)["return_pdf"] == "1"
        assert "mail_address" not in sent_body(session)
        assert "memo" not in sent_body(session)

    def test_absent_options_excluded_from_signature(self, client, payer, payee):
        options = CreateCheckOptions(
            amount="10", check_number="1", bank_routing="012345678",
            bank_account="1", payer=payer, payee=payee,
        )

        request = client.build_create_request(options, return_pdf=True)

        canonical = canonical_string(request)
        assert "memo" not in canonical
        assert "logo" not in canonical
        assert "payer%5Baddress%5D%5Bline2%5D=Suite+102" in canonical

    def test_test_mode_forces_test_flag(self, session, payer, payee):
        client = CheckeeperClient(Configuration(token=TOKEN, secret=SECRET, test_mode=True, session=session))
        options = CreateCheckOptions(
            amount="10", check_number="1", bank_routing="012345678",
            bank_account="1", payer=payer, payee=payee, test=False,
        )

        client.create_check_pdf(options)

        assert sent_body(session)["test"] == "1"

    def test_call_level_test_flag(self, client, session, payer, payee):
        options = CreateCheckOptions(
            amount="10", check_number="1", bank_routing="012345678",
            bank_account="1", payer=payer, payee=payee, test=True,
        )

        client.create_check_pdf(options)

        assert sent_body(session)["test"] == "1"

    def test_binary_inputs_sent_as_base64(self, client, session, payer, payee):
        options = MailCheckOptions(
            amount="10", check_number="1", bank_routing="012345678",
            bank_account="1", payer=payer, payee=payee,
            logo=b"\x89PNG",
            signer_image="already-base64",
            attachment=io.BytesIO(b"%PDF-1.4"),
        )

        client.mail_check(options)
        body = sent_body(session)

        assert body["payer"]["logo"] == base64.b64encode(b"\x89PNG").decode("ascii")
        assert body["payer"]["signer_image"] == "already-base64"
        assert body["attachment"] == base64.b64encode(b"%PDF-1.4").decode("ascii")

    def test_invoice_row_width_checked(self):
        with pytest.raises(ValueError, match="Invoice row 1"):
            InvoiceTable(headings=["A", "B"], rows=[["1", "2"], ["3"]])


class TestResponses:
    """Test response pass-through and error propagation."""

    def test_success_response_returned(self, client, session):
        session.post.return_value = make_response(json_data={
            "success": True, "message": "Check canceled", "check_id": "chk_1",
        })

        result = client.cancel_check("chk_1")

        assert result == {"success": True, "message": "Check canceled", "check_id": "chk_1"}

    def test_error_response_returned_not_raised(self, client, session):
        error = {"success": False, "status": 401, "message": "Invalid signature"}
        session.post.return_value = make_response(status_code=401, json_data=error)

        assert client.get_check_status("chk_1") == error

    def test_non_json_response_raises(self, client, session):
        session.post.return_value = make_response(status_code=502, text="Bad Gateway")

        with pytest.raises(APIError) as exc_info:
            client.get_check_status("chk_1")

        assert exc_info.value.status_code == 502

    def test_transport_failure_raises(self, client, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(APIError) as exc_info:
            client.get_check_status("chk_1")

        assert exc_info.value.status_code == 0
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

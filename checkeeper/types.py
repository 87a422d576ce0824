"""
Request options, wire formats and response shapes for the Checkeeper API.

Options are dataclasses built by callers. Wire requests and responses are
TypedDicts: they describe the JSON exchanged with Checkeeper and are not
validated at runtime.
"""

from dataclasses import dataclass
from typing import BinaryIO, List, Literal, Optional, Sequence, TypedDict, Union

# A string holding base64-encoded binary data
Base64String = str

# Binary input may be given as base64 text, raw bytes or a binary stream
BinaryDataInput = Union[Base64String, bytes, BinaryIO]

MailMethod = Literal["first_class", "next_day", "priority"]

CheckeeperBoolean = Literal["1", "0"]

# "YYYY-MM-DD HH:MM:SS" in Eastern Time, 24-hour clock, no offset
EasternTimeTimestamp = str

# "YYYY-MM-DD"
ISO8601Date = str

# e.g. "2022-01-15T15:00:23.012Z"
ISO8601Instant = str


@dataclass
class NameAddress:
    """A name and postal address."""
    name: str
    address_line1: str
    city: str
    state: str
    zip: str
    address_line2: Optional[str] = None
    # Defaults to US on the Checkeeper side; ignored for payer addresses
    country: Optional[str] = None


@dataclass
class InvoiceTable:
    """Invoice table printed on the check stub."""
    headings: Sequence[str]
    rows: Sequence[Sequence[Union[str, int, float]]]

    def __post_init__(self):
        for index, row in enumerate(self.rows):
            if len(row) != len(self.headings):
                raise ValueError(
                    f"Invoice row {index} has {len(row)} cells, expected {len(self.headings)}"
                )

    def to_wire(self) -> dict:
        return {
            "headings": list(self.headings),
            "rows": [list(row) for row in self.rows],
        }


@dataclass
class CreateCheckOptions:
    """Options to create a check, whether returned as a PDF or mailed."""
    # Decimal string; may include "$" and commas, e.g. "$299,957.10"
    amount: str
    check_number: str
    bank_routing: str
    bank_account: str
    payer: NameAddress
    payee: NameAddress
    test: bool = False
    # Internal note, not printed on the check
    note: Optional[str] = None
    date: Optional[ISO8601Date] = None
    memo: Optional[str] = None
    # Drawn onto the check in a handwriting font
    signer: Optional[str] = None
    # PNG or GIF
    signer_image: Optional[BinaryDataInput] = None
    # PNG, GIF or JPG
    logo: Optional[BinaryDataInput] = None
    template: Optional[str] = None
    invoice_table: Optional[InvoiceTable] = None


@dataclass
class MailCheckOptions(CreateCheckOptions):
    """Additional options for a check Checkeeper prints and mails."""
    # Defaults to first_class on the Checkeeper side
    mail_method: Optional[MailMethod] = None
    # Mail the check here instead of the payee address
    mail_address: Optional[NameAddress] = None
    # PDF printed and attached to the outbound check
    attachment: Optional[BinaryDataInput] = None


class AddressLines(TypedDict, total=False):
    line1: str
    line2: Optional[str]


class PayerRequest(TypedDict, total=False):
    name: str
    address: AddressLines
    city: str
    state: str
    zip: str
    country: Optional[str]
    logo: Optional[Base64String]
    signer: Optional[str]
    signer_image: Optional[Base64String]


class PayeeRequest(TypedDict, total=False):
    name: str
    address: AddressLines
    city: str
    state: str
    zip: str
    country: Optional[str]


class MailAddressRequest(TypedDict, total=False):
    name: str
    line1: str
    line2: Optional[str]
    city: str
    state: str
    zip: str


class InvoiceTableWire(TypedDict):
    headings: List[str]
    rows: List[List[Union[str, int, float]]]


class CreateCheckRequest(TypedDict, total=False):
    test: CheckeeperBoolean
    return_pdf: CheckeeperBoolean
    amount: str
    date: Optional[ISO8601Date]
    check_number: str
    bank_account: str
    bank_routing: str
    memo: Optional[str]
    note: Optional[str]
    payer: PayerRequest
    payee: PayeeRequest
    mail_method: Optional[MailMethod]
    mail_address: Optional[MailAddressRequest]
    template: Optional[str]
    attachment: Optional[Base64String]
    invoice_table: Optional[InvoiceTableWire]


class CheckIDRequest(TypedDict):
    check_id: str


class ListChecksRequest(TypedDict):
    start_date: EasternTimeTimestamp
    end_date: EasternTimeTimestamp


class CheckeeperErrorResponse(TypedDict):
    success: Literal[False]
    status: int
    message: str


class CheckeeperCheck(TypedDict, total=False):
    id: str
    test: CheckeeperBoolean
    date: ISO8601Date
    currency: str
    note: str
    pdf_background: bool
    attachment: Literal["none", "processed"]
    amount: str
    check_number: str
    bank_routing: str
    # All but the last 4 digits masked, e.g. "XXXXX1234"
    bank_account: str
    memo: str
    payer: dict
    payee: dict
    mail_method: MailMethod
    mail_address: dict
    invoice_table: InvoiceTableWire


class CreateCheckResponse(TypedDict):
    success: Literal[True]
    status: int
    message: str
    check: CheckeeperCheck
    # Base64 PDF when return_pdf was "1", otherwise None
    pdf: Optional[Base64String]
    # str in test mode, number in production; normalise before use
    remaining_credits: Union[str, int, float]
    # number in test mode, str in production
    credit_cost: Union[str, int, float]


class CheckStatus(TypedDict, total=False):
    check_id: str
    status: Literal["pdf", "canceled", "pending", "mailed", "test"]
    created: EasternTimeTimestamp
    # None for PDFs, otherwise "pending" or a date
    printed: Optional[str]
    mailed: Optional[str]
    mail_method: MailMethod
    # Empty when mailed without tracking
    tracking_number: str
    tracking_url: str


class GetCheckStatusResponse(TypedDict):
    success: Literal[True]
    message: str
    check: CheckStatus


class CancelCheckResponse(TypedDict):
    success: Literal[True]
    message: str
    check_id: str


class GetCheckImageResponse(TypedDict):
    success: Literal[True]
    check_id: str
    # Base64 JPG
    image: Base64String


class ListCheckItem(TypedDict, total=False):
    id: str
    date: ISO8601Date
    check_number: str
    # e.g. "24009.00"
    amount: str
    memo: str
    note: str
    test: Literal["1", "0", ""]
    # JSON number, unlike the string booleans elsewhere
    pdf: Literal[0, 1]
    payer: dict
    payee: dict


class ListChecksResponse(TypedDict):
    success: Literal[True]
    checks: List[ListCheckItem]


# pdf is None when mailed, base64 when a PDF was requested
MailCheckResult = Union[CreateCheckResponse, CheckeeperErrorResponse]
CreateCheckPDFResult = Union[CreateCheckResponse, CheckeeperErrorResponse]

"""
Validation of raw split bill creation requests.

``validate_split_bill_input`` accepts whatever the client sent and reports
every rule it breaks, in the order the rules are checked, so the client can fix
all problems at once. When the body is valid the result also carries the typed
``SplitBillInput`` the bill builder consumes.
"""
import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional

from pydantic import ValidationError

from splitbill.core.config import Settings, settings as default_settings
from splitbill.core.utils import is_valid_ethereum_address
from splitbill.schemas.split_bill import SplitBillInput

logger = logging.getLogger(__name__)

USDC_QUANT = Decimal("0.000001")  # USDC has 6 decimal places
MAX_TITLE_LENGTH = 100
# Column sizes in models/bill.py and models/transaction.py
MAX_ADDRESS_LENGTH = 64
MAX_DISPLAY_NAME_LENGTH = 100
MAX_TRANSACTION_HASH_LENGTH = 100
MAX_AMOUNT_DIGITS = 18  # Larger magnitudes are rejected as not a number


class ViolationCode(str, enum.Enum):
    INVALID_BODY = "invalid_body"
    MISSING_FIELD = "missing_field"
    INVALID_ADDRESS = "invalid_address"
    INVALID_NUMBER = "invalid_number"
    NEGATIVE_AMOUNT = "negative_amount"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"
    EMPTY_PARTICIPANTS = "empty_participants"
    TOO_MANY_PARTICIPANTS = "too_many_participants"
    DUPLICATE_PARTICIPANT = "duplicate_participant"
    MIXED_SHARES = "mixed_shares"
    SHARE_MISMATCH = "share_mismatch"
    TITLE_TOO_LONG = "title_too_long"
    DISPLAY_NAME_TOO_LONG = "display_name_too_long"


@dataclass(frozen=True)
class Violation:
    code: ViolationCode
    field: Optional[str]
    message: str

    def to_dict(self) -> dict:
        return {"code": self.code.value, "field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    errors: List[Violation] = field(default_factory=list)
    value: Optional[SplitBillInput] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.value is not None

    @property
    def messages(self) -> List[str]:
        return [v.message for v in self.errors]


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to USDC precision."""
    return amount.quantize(USDC_QUANT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a JSON number or numeric string into a finite Decimal.

    Returns None when the value is not a finite number. Booleans are rejected
    even though Python treats them as ints.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        elif isinstance(value, (int, Decimal)):
            amount = Decimal(value)
        elif isinstance(value, str) and value.strip():
            amount = Decimal(value.strip())
        else:
            return None
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount.adjusted() > MAX_AMOUNT_DIGITS:
        return None
    return amount


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_split_bill_input(raw: Any, settings: Optional[Settings] = None) -> ValidationResult:
    """Check a raw creation request; never raises."""
    settings = settings or default_settings
    result = ValidationResult()
    errors = result.errors

    def add(code: ViolationCode, field_name: Optional[str], message: str):
        errors.append(Violation(code, field_name, message))

    if not isinstance(raw, dict):
        add(ViolationCode.INVALID_BODY, None, "Request body must be a JSON object")
        return result

    # Payer
    payer = raw.get("payer")
    if _is_blank(payer) or not isinstance(payer, str):
        add(ViolationCode.MISSING_FIELD, "payer", "Payer address is required")
    elif len(payer.strip()) > MAX_ADDRESS_LENGTH:
        add(ViolationCode.INVALID_ADDRESS, "payer",
            f"Payer address cannot exceed {MAX_ADDRESS_LENGTH} characters")
    elif settings.STRICT_ADDRESSES and not is_valid_ethereum_address(payer.strip()):
        add(ViolationCode.INVALID_ADDRESS, "payer", "Invalid payer address")

    # Total amount
    total = None
    if _is_blank(raw.get("total")):
        add(ViolationCode.MISSING_FIELD, "total", "Total amount is required")
    else:
        total = parse_amount(raw.get("total"))
        if total is None:
            add(ViolationCode.INVALID_NUMBER, "total", "Total amount must be a valid number")
        elif total < 0:
            add(ViolationCode.NEGATIVE_AMOUNT, "total", "Total amount cannot be negative")
            total = None
        elif total < settings.MIN_AMOUNT:
            add(ViolationCode.AMOUNT_OUT_OF_RANGE, "total",
                f"Total amount cannot be less than {settings.MIN_AMOUNT} USDC")
        elif total > settings.MAX_AMOUNT:
            add(ViolationCode.AMOUNT_OUT_OF_RANGE, "total",
                f"Total amount cannot exceed {settings.MAX_AMOUNT} USDC")

    # Participants
    participants = raw.get("participants")
    shares: List[dict] = []
    amounts: List[Optional[Decimal]] = []
    if participants is None:
        add(ViolationCode.MISSING_FIELD, "participants", "Participants list is required")
    elif not isinstance(participants, list):
        add(ViolationCode.INVALID_BODY, "participants", "Participants must be a list")
    elif not participants:
        add(ViolationCode.EMPTY_PARTICIPANTS, "participants", "Participants list cannot be empty")
    else:
        if len(participants) > settings.MAX_PARTICIPANTS:
            add(ViolationCode.TOO_MANY_PARTICIPANTS, "participants",
                f"Participants cannot exceed {settings.MAX_PARTICIPANTS}")

        seen = set()
        for index, entry in enumerate(participants):
            field_name = f"participants[{index}]"
            if not isinstance(entry, dict):
                add(ViolationCode.INVALID_BODY, field_name, f"Participant {index + 1} must be an object")
                continue

            address = entry.get("addr", entry.get("address"))
            if _is_blank(address) or not isinstance(address, str):
                add(ViolationCode.MISSING_FIELD, f"{field_name}.addr",
                    f"Participant {index + 1} address is required")
                address = None
            else:
                address = address.strip()
                if address.lower() in seen:
                    add(ViolationCode.DUPLICATE_PARTICIPANT, f"{field_name}.addr",
                        f"Participant {address} is listed more than once")
                seen.add(address.lower())
                if len(address) > MAX_ADDRESS_LENGTH:
                    add(ViolationCode.INVALID_ADDRESS, f"{field_name}.addr",
                        f"Participant {index + 1} address cannot exceed {MAX_ADDRESS_LENGTH} characters")
                elif settings.STRICT_ADDRESSES and not is_valid_ethereum_address(address):
                    add(ViolationCode.INVALID_ADDRESS, f"{field_name}.addr",
                        f"Invalid participant address: {address}")

            amount = None
            if entry.get("amount") is not None:
                amount = parse_amount(entry.get("amount"))
                if amount is None:
                    add(ViolationCode.INVALID_NUMBER, f"{field_name}.amount",
                        f"Participant {index + 1} amount must be a valid number")
                elif amount < 0:
                    add(ViolationCode.NEGATIVE_AMOUNT, f"{field_name}.amount",
                        f"Participant {index + 1} amount cannot be negative")

            display_name = entry.get("display_name", entry.get("displayName"))
            if display_name is not None and not isinstance(display_name, str):
                add(ViolationCode.INVALID_BODY, f"{field_name}.display_name",
                    f"Participant {index + 1} display name must be a string")
            elif display_name and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
                add(ViolationCode.DISPLAY_NAME_TOO_LONG, f"{field_name}.display_name",
                    f"Participant {index + 1} display name cannot exceed {MAX_DISPLAY_NAME_LENGTH} characters")

            amounts.append(amount)
            shares.append({
                "address": address,
                "amount": amount,
                "display_name": display_name,
            })

        given = [entry.get("amount") is not None for entry in participants if isinstance(entry, dict)]
        if any(given) and not all(given):
            add(ViolationCode.MIXED_SHARES, "participants",
                "Either every participant or no participant must have an amount")
        elif given and all(given) and total is not None and all(a is not None for a in amounts):
            share_sum = sum(amounts, Decimal(0))
            if abs(share_sum - total) > settings.SHARE_TOLERANCE:
                add(ViolationCode.SHARE_MISMATCH, "participants",
                    f"Participant amounts add up to {share_sum}, expected {total}")

    # Title
    title = raw.get("title")
    if title is not None and not isinstance(title, str):
        add(ViolationCode.INVALID_BODY, "title", "Title must be a string")
    elif title and len(title) > MAX_TITLE_LENGTH:
        add(ViolationCode.TITLE_TOO_LONG, "title", f"Title cannot exceed {MAX_TITLE_LENGTH} characters")

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        add(ViolationCode.INVALID_BODY, "description", "Description must be a string")

    if errors:
        return result

    try:
        result.value = SplitBillInput(
            payer=payer.strip(),
            total=quantize_amount(total),
            participants=[
                dict(share, amount=quantize_amount(share["amount"]) if share["amount"] is not None else None)
                for share in shares
            ],
            title=title,
            description=description,
        )
    except ValidationError as e:
        logger.warning(f"Split bill input passed checks but failed to parse: {e}")
        add(ViolationCode.INVALID_BODY, None, "Request body could not be parsed")
    return result

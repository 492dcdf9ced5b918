"""
Split bill construction and lifecycle.

All functions here are pure: they take a bill and return a new one. Saving the
result is the caller's job (see ``split_storage``).
"""
import uuid
from decimal import Decimal, ROUND_DOWN
from typing import List, Optional, Tuple

from splitbill.core.errors import InputError, NotFoundError
from splitbill.core.network import NetworkConfig
from splitbill.core.utils import format_address, is_valid_ethereum_address, utcnow
from splitbill.schemas.split_bill import Participant, SplitBill, SplitBillInput, SplitBillStats
from splitbill.services.split_validation import (
    MAX_ADDRESS_LENGTH, MAX_DISPLAY_NAME_LENGTH, MAX_TRANSACTION_HASH_LENGTH, USDC_QUANT
)

DEFAULT_TITLE = "Split bill"


def generate_bill_id() -> str:
    return f"bill_{uuid.uuid4().hex}"


def generate_participant_id() -> str:
    return f"participant_{uuid.uuid4().hex}"


def generate_share_url(bill_id: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/split/{bill_id}"


def split_equally(total: Decimal, count: int) -> List[Decimal]:
    """
    Split total into count shares at USDC precision.

    Each share is rounded down; leftover micro-units go one each to the first
    shares so the shares always sum to total exactly.
    """
    if count <= 0:
        return []
    base = (total / count).quantize(USDC_QUANT, rounding=ROUND_DOWN)
    remainder = int((total - base * count) / USDC_QUANT)
    return [base + USDC_QUANT if i < remainder else base for i in range(count)]


def _average(total: Decimal, count: int) -> Decimal:
    if count <= 0:
        return total
    return (total / count).quantize(USDC_QUANT, rounding=ROUND_DOWN)


def build_split_bill(
    input: SplitBillInput,
    network: Optional[NetworkConfig] = None,
    share_base_url: Optional[str] = None,
) -> SplitBill:
    """
    Turn a validated creation request into a canonical bill.

    The input must come from ``validate_split_bill_input``; nothing is
    rechecked here.
    """
    if not isinstance(input, SplitBillInput):
        raise TypeError(
            f"build_split_bill expects a validated SplitBillInput, got {type(input).__name__}"
        )

    bill_id = generate_bill_id()
    now = utcnow()
    payer = input.payer.lower()

    if all(share.amount is None for share in input.participants):
        amounts = split_equally(input.total, len(input.participants))
    else:
        amounts = [share.amount for share in input.participants]

    participants = []
    for share, amount in zip(input.participants, amounts):
        address = share.address.lower()
        participants.append(Participant(
            id=generate_participant_id(),
            address=address,
            display_name=share.display_name or format_address(share.address),
            amount=amount,
            # The payer already covered the bill
            status="paid" if address == payer else "pending",
            paid_at=now if address == payer else None,
        ))

    return SplitBill(
        id=bill_id,
        title=(input.title or "").strip() or DEFAULT_TITLE,
        description=input.description.strip() if input.description else None,
        total_amount=input.total,
        participant_count=len(participants),
        amount_per_person=_average(input.total, len(participants)),
        payer_address=payer,
        participants=tuple(participants),
        chain_id=network.chain_id if network else None,
        share_url=generate_share_url(bill_id, share_base_url) if share_base_url else None,
        created_at=now,
        updated_at=now,
    )


def can_join_bill(bill: SplitBill, address: str) -> Tuple[bool, Optional[str]]:
    """Check whether address may join bill; returns (allowed, reason)."""
    if bill.status != "active":
        return False, "Split is closed"
    if bill.payer_address == address.lower():
        return False, "Creator cannot join payment"
    if any(p.address == address.lower() for p in bill.participants):
        return False, "You have already joined this split"
    return True, None


def add_participant(
    bill: SplitBill,
    address: str,
    display_name: Optional[str] = None,
    strict_address: bool = True,
) -> SplitBill:
    """Add a participant and re-split the total equally across everyone."""
    if not address or not address.strip():
        raise InputError("Participant address is required")
    address = address.strip()
    if len(address) > MAX_ADDRESS_LENGTH:
        raise InputError(f"Participant address cannot exceed {MAX_ADDRESS_LENGTH} characters")
    if display_name and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise InputError(f"Display name cannot exceed {MAX_DISPLAY_NAME_LENGTH} characters")
    if strict_address and not is_valid_ethereum_address(address):
        raise InputError("Invalid Ethereum address")
    allowed, reason = can_join_bill(bill, address)
    if not allowed:
        raise InputError(reason)

    count = len(bill.participants) + 1
    amounts = split_equally(bill.total_amount, count)
    updated = [p.model_copy(update={"amount": amount}) for p, amount in zip(bill.participants, amounts)]
    updated.append(Participant(
        id=generate_participant_id(),
        address=address.lower(),
        display_name=display_name or format_address(address),
        amount=amounts[-1],
        status="pending",
    ))

    return bill.model_copy(update={
        "participants": tuple(updated),
        "participant_count": count,
        "amount_per_person": _average(bill.total_amount, count),
        "updated_at": utcnow(),
    })


def update_participant_payment(
    bill: SplitBill,
    participant_id: str,
    transaction_hash: str,
    status: str = "paid",
) -> SplitBill:
    """
    Record a participant's payment; completes the bill once everyone has paid.

    A share can be paid once. The only later change allowed is confirming a
    payment that was reported as paid.
    """
    participant = next((p for p in bill.participants if p.id == participant_id), None)
    if participant is None:
        raise NotFoundError("Specified participant not found")
    if bill.status != "active":
        raise InputError("Split is closed")
    if participant.status == "confirmed" or (participant.status == "paid" and status != "confirmed"):
        raise InputError("Payment has already been recorded for this participant")
    if len(transaction_hash) > MAX_TRANSACTION_HASH_LENGTH:
        raise InputError("Transaction hash is too long")

    now = utcnow()
    participants = tuple(
        p.model_copy(update={
            "status": status,
            "transaction_hash": transaction_hash,
            "paid_at": p.paid_at or now,
        })
        if p.id == participant_id else p
        for p in bill.participants
    )
    new_status = bill.status
    if participants and all(p.status in ("paid", "confirmed") for p in participants):
        new_status = "completed"

    return bill.model_copy(update={
        "participants": participants,
        "status": new_status,
        "updated_at": now,
    })


def calculate_bill_stats(bill: SplitBill) -> SplitBillStats:
    """Summarize how much of a bill has been paid."""
    paid = [p for p in bill.participants if p.status in ("paid", "confirmed")]
    pending = [p for p in bill.participants if p.status == "pending"]
    count = len(bill.participants)
    completion_rate = round(len(paid) / count * 100) if count else 0

    return SplitBillStats(
        total_paid=sum((p.amount for p in paid), Decimal(0)).quantize(USDC_QUANT),
        total_pending=sum((p.amount for p in pending), Decimal(0)).quantize(USDC_QUANT),
        paid_participants=len(paid),
        pending_participants=len(pending),
        completion_rate=completion_rate,
    )

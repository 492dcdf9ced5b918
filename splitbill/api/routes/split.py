"""
Split bill creation and management routes.
"""
import logging
from typing import Any
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from splitbill.core.config import settings
from splitbill.core.errors import InputError, NotFoundError, ValidationFailed
from splitbill.core.network import NetworkConfig, get_network
from splitbill.core.utils import format_response
from splitbill.db.session import get_db
from splitbill.schemas.split_bill import SplitBill, SplitBillUpdate
from splitbill.services.split_service import (
    add_participant, build_split_bill, calculate_bill_stats, update_participant_payment
)
from splitbill.services.split_storage import (
    delete_split_bill, get_bill_transactions, get_split_bill,
    save_payment_transaction, save_split_bill
)
from splitbill.services.split_validation import validate_split_bill_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/split", tags=["split"])


def get_bill_or_404(bill_id: str, db: Session) -> SplitBill:
    """Load a bill or raise NotFoundError."""
    if not bill_id or not bill_id.strip():
        raise InputError("Bill ID is required")
    bill = get_split_bill(db, bill_id)
    if not bill:
        raise NotFoundError("Split bill not found")
    return bill


@router.post("/create")
async def create_split_bill(
    body: Any = Body(None),
    network: NetworkConfig = Depends(get_network),
    db: Session = Depends(get_db)
):
    """Validate, build and save a new split bill."""
    validation = validate_split_bill_input(body, settings)
    if not validation.is_valid:
        logger.info(f"Rejected split bill input: {validation.messages}")
        raise ValidationFailed(validation.errors)

    bill = build_split_bill(validation.value, network=network, share_base_url=settings.PUBLIC_URL)
    save_split_bill(db, bill)

    return format_response(bill.model_dump(mode="json"), "Split bill created successfully")


@router.options("/create")
async def create_split_bill_options():
    return {}


@router.get("/{bill_id}")
async def get_split_bill_detail(bill_id: str, db: Session = Depends(get_db)):
    """Get a split bill by id."""
    bill = get_bill_or_404(bill_id, db)
    return format_response(bill.model_dump(mode="json"))


@router.patch("/{bill_id}")
async def update_split_bill(
    bill_id: str,
    update: SplitBillUpdate,
    db: Session = Depends(get_db)
):
    """Join a split bill (action=join) or report a payment (action=payment)."""
    if update.action not in ("join", "payment"):
        raise InputError("Invalid action type")

    bill = get_bill_or_404(bill_id, db)

    if update.action == "join":
        updated = add_participant(
            bill,
            update.participant_address or "",
            update.display_name,
            strict_address=settings.STRICT_ADDRESSES
        )
        save_split_bill(db, updated)
        message = "Joined split bill successfully"
    else:
        if not update.transaction_hash:
            raise InputError("Transaction hash is required")
        if not update.participant_id:
            raise InputError("Participant ID is required")
        updated = update_participant_payment(
            bill, update.participant_id, update.transaction_hash, update.status
        )
        save_payment_transaction(
            db, updated, update.participant_id, update.transaction_hash,
            status="confirmed" if update.status == "confirmed" else "pending"
        )
        message = "Payment status updated successfully"

    return format_response(updated.model_dump(mode="json"), message)


@router.delete("/{bill_id}")
async def remove_split_bill(bill_id: str, db: Session = Depends(get_db)):
    """Delete a split bill."""
    if not delete_split_bill(db, bill_id):
        raise NotFoundError("Split bill not found")
    return format_response(message="Split bill deleted successfully")


@router.options("/{bill_id}")
async def split_bill_options(bill_id: str):
    return {}


@router.get("/{bill_id}/stats")
async def get_split_bill_stats(bill_id: str, db: Session = Depends(get_db)):
    """Payment progress of a split bill."""
    bill = get_bill_or_404(bill_id, db)
    return format_response(calculate_bill_stats(bill).model_dump(mode="json"))


@router.get("/{bill_id}/transactions")
async def get_split_bill_transactions(bill_id: str, db: Session = Depends(get_db)):
    """Payment transactions recorded for a split bill, newest first."""
    get_bill_or_404(bill_id, db)
    transactions = get_bill_transactions(db, bill_id)
    return format_response([t.model_dump(mode="json") for t in transactions])

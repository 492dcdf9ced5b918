"""
Split bill persistence.

Converts between the immutable ``SplitBill`` records and their SQLAlchemy
rows. Database failures are logged, rolled back and re-raised as
``StorageError``.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from splitbill.core.errors import StorageError
from splitbill.core.utils import utcnow
from splitbill.models.bill import Bill, BillParticipant
from splitbill.models.transaction import PaymentTransaction
from splitbill.schemas.split_bill import (
    Participant, PaymentTransactionResponse, SplitBill, StorageStats
)

logger = logging.getLogger(__name__)


def _apply_participant(row: BillParticipant, participant: Participant, position: int) -> None:
    row.position = position
    row.address = participant.address
    row.display_name = participant.display_name
    row.amount = participant.amount
    row.status = participant.status
    row.paid_at = participant.paid_at
    row.transaction_hash = participant.transaction_hash


def _to_bill(row: Bill) -> SplitBill:
    return SplitBill.model_validate(row)


def _stage_split_bill(db: Session, bill: SplitBill) -> None:
    """Add or update the rows of bill in the session without committing."""
    row = db.get(Bill, bill.id)
    if row is None:
        row = Bill(id=bill.id, created_at=bill.created_at)
        db.add(row)

    row.title = bill.title
    row.description = bill.description
    row.total_amount = bill.total_amount
    row.currency = bill.currency
    row.participant_count = bill.participant_count
    row.amount_per_person = bill.amount_per_person
    row.payer_address = bill.payer_address
    row.status = bill.status
    row.chain_id = bill.chain_id
    row.share_url = bill.share_url
    row.nft_receipt_id = bill.nft_receipt_id
    row.updated_at = bill.updated_at

    # Merge participants by id so existing rows are updated in place
    existing = {p.id: p for p in row.participants}
    keep = []
    for position, participant in enumerate(bill.participants):
        participant_row = existing.get(participant.id)
        if participant_row is None:
            participant_row = BillParticipant(id=participant.id, created_at=bill.updated_at)
        _apply_participant(participant_row, participant, position)
        keep.append(participant_row)
    row.participants = keep


def save_split_bill(db: Session, bill: SplitBill) -> None:
    """Insert or update a bill together with its participants."""
    if not isinstance(bill, SplitBill):
        raise TypeError("save_split_bill only accepts SplitBill records")
    try:
        _stage_split_bill(db, bill)
        db.commit()
        logger.info(f"Saved split bill: {bill.id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving split bill {bill.id}: {e}", exc_info=True)
        raise StorageError("Failed to save split bill") from e


def get_split_bill(db: Session, bill_id: str) -> Optional[SplitBill]:
    """Fetch a bill by id, or None."""
    try:
        row = db.query(Bill).options(selectinload(Bill.participants)).filter(Bill.id == bill_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error getting split bill {bill_id}: {e}", exc_info=True)
        raise StorageError("Failed to fetch split bill") from e
    return _to_bill(row) if row else None


def get_user_split_bills(db: Session, address: str) -> List[SplitBill]:
    """Bills created by address, newest first."""
    try:
        rows = db.query(Bill).options(selectinload(Bill.participants)).filter(
            Bill.payer_address == address.lower()
        ).order_by(Bill.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error getting user split bills for {address}: {e}", exc_info=True)
        raise StorageError("Failed to fetch user bills") from e
    return [_to_bill(row) for row in rows]


def get_participant_split_bills(db: Session, address: str) -> List[SplitBill]:
    """Bills address takes part in without having created them, newest first."""
    address = address.lower()
    try:
        bill_ids = select(BillParticipant.bill_id).where(BillParticipant.address == address)
        rows = db.query(Bill).options(selectinload(Bill.participants)).filter(
            Bill.id.in_(bill_ids),
            Bill.payer_address != address
        ).order_by(Bill.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error getting participant bills for {address}: {e}", exc_info=True)
        raise StorageError("Failed to fetch participant bills") from e
    return [_to_bill(row) for row in rows]


def delete_split_bill(db: Session, bill_id: str) -> bool:
    """Delete a bill; returns False when it did not exist."""
    try:
        row = db.get(Bill, bill_id)
        if row is None:
            return False
        db.delete(row)
        db.commit()
        logger.info(f"Deleted split bill: {bill_id}")
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting split bill {bill_id}: {e}", exc_info=True)
        raise StorageError("Failed to delete split bill") from e


def save_payment_transaction(
    db: Session,
    bill: SplitBill,
    participant_id: str,
    tx_hash: str,
    status: str = "pending",
) -> PaymentTransactionResponse:
    """
    Save bill and a payment record for one of its participants.

    bill is the already-updated record; both writes share one commit, so a
    failure leaves neither the payment status nor the transaction stored.
    """
    if not isinstance(bill, SplitBill):
        raise TypeError("save_payment_transaction only accepts SplitBill records")
    participant = next(p for p in bill.participants if p.id == participant_id)
    now = utcnow()
    row = PaymentTransaction(
        id=f"tx_{uuid.uuid4().hex}",
        bill_id=bill.id,
        participant_id=participant_id,
        amount=participant.amount,
        currency=bill.currency,
        tx_hash=tx_hash,
        status=status,
        confirmed_at=now if status == "confirmed" else None,
        created_at=now,
        updated_at=now
    )
    try:
        _stage_split_bill(db, bill)
        db.add(row)
        db.commit()
        logger.info(f"Saved payment transaction {row.id} for bill {bill.id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving payment transaction for bill {bill.id}: {e}", exc_info=True)
        raise StorageError("Failed to save payment transaction") from e
    return PaymentTransactionResponse.model_validate(row)


def get_bill_transactions(db: Session, bill_id: str) -> List[PaymentTransactionResponse]:
    """Payment transactions of a bill, newest first."""
    try:
        rows = db.query(PaymentTransaction).filter(
            PaymentTransaction.bill_id == bill_id
        ).order_by(PaymentTransaction.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error getting transactions for bill {bill_id}: {e}", exc_info=True)
        raise StorageError("Failed to fetch bill transactions") from e
    return [PaymentTransactionResponse.model_validate(row) for row in rows]


def get_stats(db: Session) -> StorageStats:
    """Bill and transaction counts."""
    try:
        by_status = dict(
            db.query(Bill.status, func.count(Bill.id)).group_by(Bill.status).all()
        )
        total_transactions = db.query(func.count(PaymentTransaction.id)).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Error getting stats: {e}", exc_info=True)
        raise StorageError("Failed to fetch stats") from e

    return StorageStats(
        total_bills=sum(by_status.values()),
        active_bills=by_status.get("active", 0),
        completed_bills=by_status.get("completed", 0),
        total_transactions=total_transactions,
    )

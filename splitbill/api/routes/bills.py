"""
Bill listing routes.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from splitbill.core.errors import InputError
from splitbill.core.utils import format_response
from splitbill.db.session import get_db
from splitbill.schemas.split_bill import SplitBill
from splitbill.services.split_storage import (
    get_participant_split_bills, get_stats, get_user_split_bills
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bills", tags=["bills"])


def require_address(address: str) -> str:
    """Reject blank address path parameters."""
    if not address or not address.strip():
        raise InputError("Address is required")
    return address.strip()


@router.get("/stats")
async def get_bill_stats(db: Session = Depends(get_db)):
    """Counts of stored bills and payment transactions."""
    return format_response(get_stats(db).model_dump(mode="json"))


@router.get("/user/{address}", response_model=List[SplitBill])
async def get_bills_created_by_user(address: str, db: Session = Depends(get_db)):
    """Get bills created by an address, newest first."""
    bills = get_user_split_bills(db, require_address(address))
    logger.debug(f"Found {len(bills)} bills created by {address}")
    return bills


@router.get("/participant/{address}", response_model=List[SplitBill])
async def get_bills_joined_by_user(address: str, db: Session = Depends(get_db)):
    """Get bills an address participates in but did not create."""
    return get_participant_split_bills(db, require_address(address))

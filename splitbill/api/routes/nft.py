"""
NFT receipt routes.
"""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from splitbill.core.errors import InputError, NotFoundError
from splitbill.core.utils import format_response, utcnow
from splitbill.db.session import get_db
from splitbill.schemas.nft import NFTCreate
from splitbill.services.nft_storage import (
    delete_nft, get_nft, get_nfts_by_bill, get_user_nft_count, get_user_nfts, store_nft
)
from splitbill.services.split_storage import get_split_bill, save_split_bill

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nft", tags=["nft"])


@router.get("/list")
async def list_nfts(
    user_id: Optional[str] = Query(None, alias="userId"),
    bill_id: Optional[str] = Query(None, alias="billId"),
    db: Session = Depends(get_db)
):
    """List a user's NFTs, optionally only those minted for one bill."""
    if bill_id:
        nfts = get_nfts_by_bill(db, bill_id, user_id)
    else:
        nfts = get_user_nfts(db, user_id)
    count = get_user_nft_count(db, user_id)

    return format_response({
        "nfts": [nft.model_dump(mode="json") for nft in nfts],
        "count": count,
        "total": len(nfts),
    })


@router.post("/create")
async def create_nft(nft_data: NFTCreate, db: Session = Depends(get_db)):
    """Store a generated NFT receipt and link it to its bill when stored."""
    if not nft_data.params or not nft_data.image_data:
        raise InputError("Missing required parameters")
    if not nft_data.params.participants:
        raise InputError("At least one participant is required")
    if not nft_data.params.total_amount or nft_data.params.total_amount <= 0:
        raise InputError("Valid total amount is required")

    nft = store_nft(db, nft_data.params, nft_data.image_data, nft_data.user_id)
    logger.info(f"Created NFT {nft.id} for bill {nft.bill_id}")

    bill = get_split_bill(db, nft.bill_id) if nft.bill_id else None
    if bill:
        save_split_bill(db, bill.model_copy(update={"nft_receipt_id": nft.id, "updated_at": utcnow()}))

    response = format_response(message="NFT created successfully")
    response["nft_id"] = nft.id
    return response


@router.get("/{nft_id}")
async def get_nft_detail(
    nft_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Get an NFT by id; userId is used as an owner hint."""
    if not nft_id or not nft_id.strip():
        raise InputError("NFT ID is required")

    nft = get_nft(db, nft_id, user_id)
    if not nft:
        raise NotFoundError("NFT not found")
    return format_response(nft.model_dump(mode="json"))


@router.delete("/{nft_id}")
async def remove_nft(
    nft_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Delete one of a user's NFTs."""
    if not delete_nft(db, nft_id, user_id):
        raise NotFoundError("NFT not found")
    return format_response(message="NFT deleted successfully")

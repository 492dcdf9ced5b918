"""
NFT receipt storage.

Records are keyed by id and owning user. Anonymous receipts are stored under
the ``anonymous`` user.
"""
import logging
import secrets
import string
import time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from splitbill.core.errors import StorageError
from splitbill.core.utils import utcnow
from splitbill.models.nft import NFTReceipt
from splitbill.schemas.nft import NFTData, NFTGenerationParams

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"
_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_nft_id() -> str:
    """Unique id of the form nft_<base36 millis>_<6 random chars>."""
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"nft_{timestamp}_{random_part}"


def build_nft_metadata(params: NFTGenerationParams) -> dict:
    """Metadata stored alongside a generated receipt image."""
    count = len(params.participants)
    total = params.total_amount or 0
    return {
        "title": params.bill_title,
        "participants": list(params.participants),
        "total_amount": total,
        "location": params.location,
        "time_of_day": params.time_of_day,
        "participant_count": count,
        "amount_per_person": total / count if count else total,
    }


def store_nft(
    db: Session,
    params: NFTGenerationParams,
    image_data: str,
    user_id: Optional[str] = None,
) -> NFTData:
    """Persist a new NFT receipt and return it."""
    now = utcnow()
    row = NFTReceipt(
        id=generate_nft_id(),
        bill_id=params.bill_id,
        user_id=user_id or ANONYMOUS_USER,
        image_data=image_data,
        nft_metadata=build_nft_metadata(params),
        created_at=now,
        updated_at=now
    )
    try:
        db.add(row)
        db.commit()
        logger.info(f"Stored NFT {row.id} for user {row.user_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error storing NFT: {e}", exc_info=True)
        raise StorageError("Failed to store NFT") from e
    return NFTData.model_validate(row)


def get_nft(db: Session, nft_id: str, owner_hint: Optional[str] = None) -> Optional[NFTData]:
    """
    Look up an NFT by id.

    The owner hint is tried first; when it does not match, the id is looked up
    across all users.
    """
    try:
        row = None
        if owner_hint:
            row = db.query(NFTReceipt).filter(
                NFTReceipt.id == nft_id,
                NFTReceipt.user_id == owner_hint
            ).first()
        if row is None:
            row = db.query(NFTReceipt).filter(NFTReceipt.id == nft_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error retrieving NFT {nft_id}: {e}", exc_info=True)
        raise StorageError("Failed to retrieve NFT") from e
    return NFTData.model_validate(row) if row else None


def get_user_nfts(db: Session, user_id: Optional[str] = None) -> List[NFTData]:
    """All NFTs of a user, newest first."""
    user_id = user_id or ANONYMOUS_USER
    try:
        rows = db.query(NFTReceipt).filter(
            NFTReceipt.user_id == user_id
        ).order_by(NFTReceipt.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error retrieving NFTs for user {user_id}: {e}", exc_info=True)
        raise StorageError("Failed to retrieve NFTs") from e
    logger.debug(f"Retrieved {len(rows)} NFTs for user {user_id}")
    return [NFTData.model_validate(row) for row in rows]


def get_user_nft_count(db: Session, user_id: Optional[str] = None) -> int:
    try:
        return db.query(func.count(NFTReceipt.id)).filter(
            NFTReceipt.user_id == (user_id or ANONYMOUS_USER)
        ).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Error counting NFTs: {e}", exc_info=True)
        raise StorageError("Failed to count NFTs") from e


def get_nfts_by_bill(db: Session, bill_id: str, user_id: Optional[str] = None) -> List[NFTData]:
    """NFTs of a user that were minted for bill_id."""
    return [nft for nft in get_user_nfts(db, user_id) if nft.bill_id == bill_id]


def delete_nft(db: Session, nft_id: str, user_id: Optional[str] = None) -> bool:
    """Delete a user's NFT; returns False when it did not exist."""
    try:
        deleted = db.query(NFTReceipt).filter(
            NFTReceipt.id == nft_id,
            NFTReceipt.user_id == (user_id or ANONYMOUS_USER)
        ).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting NFT {nft_id}: {e}", exc_info=True)
        raise StorageError("Failed to delete NFT") from e
    return deleted > 0

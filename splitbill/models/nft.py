"""
NFT receipt model.
"""
from sqlalchemy import Column, String, Text, JSON
from splitbill.db.base import BaseModel


class NFTReceipt(BaseModel):
    """Stored NFT receipt; contents are opaque to the bill workflow."""
    __tablename__ = "nfts"

    id = Column(String(64), primary_key=True)
    bill_id = Column(String(64), nullable=True, index=True)
    user_id = Column(String(64), nullable=False, default="anonymous", index=True)
    image_data = Column(Text, nullable=False)  # Base64 encoded image
    nft_metadata = Column("metadata", JSON, nullable=False, default=dict)

"""
Pydantic schemas for NFT receipts.
"""
from pydantic import BaseModel, Field, AliasChoices
from typing import Any, Dict, List, Optional
from datetime import datetime


class NFTGenerationParams(BaseModel):
    """Bill details an NFT receipt was generated from."""
    participants: List[str] = []
    total_amount: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("total_amount", "totalAmount")
    )
    bill_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("bill_id", "billId"))
    bill_title: Optional[str] = Field(default=None, validation_alias=AliasChoices("bill_title", "billTitle"))
    location: Optional[str] = None
    time_of_day: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("time_of_day", "timeOfDay")
    )


class NFTCreate(BaseModel):
    """Schema for NFT creation."""
    params: Optional[NFTGenerationParams] = None
    image_data: Optional[str] = Field(default=None, validation_alias=AliasChoices("image_data", "imageData"))
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))


class NFTData(BaseModel):
    """Schema for NFT response."""
    id: str
    bill_id: Optional[str] = None
    user_id: str
    image_data: str
    metadata: Dict[str, Any] = Field(validation_alias=AliasChoices("nft_metadata", "metadata"))
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

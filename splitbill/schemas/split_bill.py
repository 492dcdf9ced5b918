"""
Pydantic schemas for SplitBill entity.
"""
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Literal, Optional, Tuple
from datetime import datetime
from decimal import Decimal

ParticipantStatus = Literal["pending", "paid", "confirmed"]
BillStatus = Literal["active", "completed", "cancelled"]


class ParticipantShare(BaseModel):
    """One participant entry of a creation request."""
    model_config = ConfigDict(frozen=True)

    address: str = Field(validation_alias=AliasChoices("addr", "address"))
    amount: Optional[Decimal] = None  # None means split equally
    display_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("display_name", "displayName")
    )


class SplitBillInput(BaseModel):
    """
    Typed split bill creation request.

    Only produced by ``validate_split_bill_input`` once the raw body has
    passed every check; amounts are already quantized to USDC precision.
    """
    model_config = ConfigDict(frozen=True)

    payer: str
    total: Decimal
    participants: Tuple[ParticipantShare, ...]
    title: Optional[str] = None
    description: Optional[str] = None


class Participant(BaseModel):
    """Resolved obligation of one participant."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    address: str
    display_name: Optional[str] = None
    amount: Decimal
    status: ParticipantStatus = "pending"
    paid_at: Optional[datetime] = None
    transaction_hash: Optional[str] = None


class SplitBill(BaseModel):
    """Canonical, immutable split bill record."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    total_amount: Decimal
    currency: Literal["USDC"] = "USDC"
    participant_count: int
    amount_per_person: Decimal
    payer_address: str
    status: BillStatus = "active"
    participants: Tuple[Participant, ...] = ()
    chain_id: Optional[int] = None
    share_url: Optional[str] = None
    nft_receipt_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SplitBillUpdate(BaseModel):
    """Body of PATCH /split/{bill_id}: join a bill or report a payment."""
    action: Optional[str] = None
    # join
    participant_address: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("participant_address", "participantAddress")
    )
    display_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("display_name", "displayName")
    )
    # payment
    participant_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("participant_id", "participantId")
    )
    transaction_hash: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transaction_hash", "transactionHash")
    )
    status: Literal["paid", "confirmed"] = "paid"


class SplitBillStats(BaseModel):
    """Payment progress of a bill."""
    total_paid: Decimal
    total_pending: Decimal
    paid_participants: int
    pending_participants: int
    completion_rate: int  # 0-100


class PaymentTransactionResponse(BaseModel):
    """Schema for payment transaction response."""
    id: str
    bill_id: str
    participant_id: str
    amount: Decimal
    currency: str
    tx_hash: str
    status: Literal["pending", "confirmed", "failed"]
    created_at: datetime
    confirmed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StorageStats(BaseModel):
    """Counts across all stored bills."""
    total_bills: int
    active_bills: int
    completed_bills: int
    total_transactions: int


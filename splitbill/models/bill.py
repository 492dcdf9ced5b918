"""
Split bill models.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, Text, DateTime
from sqlalchemy.orm import relationship
from splitbill.db.base import BaseModel


class Bill(BaseModel):
    """A total amount apportioned among participants."""
    __tablename__ = "split_bills"

    id = Column(String(64), primary_key=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    total_amount = Column(Numeric(18, 6), nullable=False)
    currency = Column(String(10), nullable=False, default="USDC")
    participant_count = Column(Integer, nullable=False)
    amount_per_person = Column(Numeric(18, 6), nullable=False)
    payer_address = Column(String(64), nullable=False, index=True)  # Stored lower-cased
    status = Column(String(20), nullable=False, default="active", index=True)
    chain_id = Column(Integer, nullable=True)
    share_url = Column(String(255), nullable=True)
    nft_receipt_id = Column(String(64), nullable=True)

    # Relationships
    participants = relationship(
        "BillParticipant",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillParticipant.position"
    )
    transactions = relationship("PaymentTransaction", back_populates="bill", cascade="all, delete-orphan")


class BillParticipant(BaseModel):
    """A participant's obligation within a bill."""
    __tablename__ = "bill_participants"

    id = Column(String(64), primary_key=True)
    bill_id = Column(String(64), ForeignKey("split_bills.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # Order within the bill
    address = Column(String(64), nullable=False, index=True)  # Stored lower-cased
    display_name = Column(String(100), nullable=True)
    amount = Column(Numeric(18, 6), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    paid_at = Column(DateTime, nullable=True)
    transaction_hash = Column(String(100), nullable=True)

    # Relationships
    bill = relationship("Bill", back_populates="participants")

"""
Payment transaction model.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from splitbill.db.base import BaseModel


class PaymentTransaction(BaseModel):
    """On-chain payment reported for a bill participant."""
    __tablename__ = "payment_transactions"

    id = Column(String(64), primary_key=True)
    bill_id = Column(String(64), ForeignKey("split_bills.id"), nullable=False, index=True)
    participant_id = Column(String(64), nullable=False)
    amount = Column(Numeric(18, 6), nullable=False)
    currency = Column(String(10), nullable=False, default="USDC")
    tx_hash = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, failed
    confirmed_at = Column(DateTime, nullable=True)

    # Relationships
    bill = relationship("Bill", back_populates="transactions")

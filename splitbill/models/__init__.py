"""Models package - Import all models for SQLAlchemy registration."""
from splitbill.models.bill import Bill, BillParticipant
from splitbill.models.transaction import PaymentTransaction
from splitbill.models.nft import NFTReceipt

__all__ = [
    "Bill",
    "BillParticipant",
    "PaymentTransaction",
    "NFTReceipt",
]

"""
PurchaseRecord: immutable purchase ledger entry.
One row per (listing, buyer) and one row per payment tx hash, enforced by the database.
Price and both addresses are snapshots taken at purchase time.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Numeric, String, UniqueConstraint

from notesmarket.db.base import Base


class PurchaseRecord(Base):
    __tablename__ = "note_purchases"
    __table_args__ = (
        UniqueConstraint("listing_id", "buyer_id", name="uq_purchase_listing_buyer"),
        UniqueConstraint("tx_hash", name="uq_purchase_tx_hash"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    listing_id = Column(String, nullable=False, index=True)
    # Entitlement key only; history views never expose it and join buyers by tx hash.
    buyer_id = Column(String, nullable=False, index=True)
    purchase_price = Column(Numeric(20, 6), nullable=False)
    tx_hash = Column(String, nullable=False)
    buyer_address = Column(String, nullable=False)
    seller_address = Column(String, nullable=False, index=True)
    purchased_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

"""
Listing model: a note offered for sale by its seller.
Never hard-deleted: delisting flips status, purchases keep pointing at the row.
"""
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text

from notesmarket.db.base import Base


class ListingStatus(str, Enum):
    ACTIVE = "active"
    DELISTED = "delisted"


class Listing(Base):
    __tablename__ = "marketplace_listings"
    __table_args__ = (CheckConstraint("price > 0", name="ck_listing_price_positive"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    seller_id = Column(String, nullable=False, index=True)
    seller_address = Column(String, nullable=False)  # payment address, editable by seller
    title = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    content = Column(Text, nullable=False)
    price = Column(Numeric(20, 6), nullable=False)
    status = Column(String, nullable=False, default=ListingStatus.ACTIVE.value, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    purchase_count = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE.value

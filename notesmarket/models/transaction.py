"""
TransactionRecord: append-only log of claimed on-chain payments.
tx_hash is globally unique; the hash itself is trusted, not verified on chain.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from notesmarket.db.base import Base


class TransactionRecord(Base):
    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    tx_hash = Column(String, unique=True, nullable=False)
    sender_address = Column(String, nullable=False)
    recipient_address = Column(String, nullable=False)
    amount = Column(Numeric(20, 6), nullable=False)
    user_id = Column(String, nullable=False, index=True)     # owner (the payer)
    note_id = Column(String, nullable=True, index=True)      # e.g. buyer's private copy
    network_id = Column(Integer, nullable=True)
    tx_metadata = Column("metadata", Text, nullable=True)    # free-form, human readable
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class TransactionIn(BaseModel):
    tx_hash: str = Field(..., min_length=1)
    sender_address: str = Field(..., min_length=1)
    recipient_address: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    note_id: str | None = None
    network_id: int | None = None
    metadata: str | None = None


class TransactionView(BaseModel):
    id: str
    tx_hash: str
    sender_address: str | None = None
    recipient_address: str | None = None
    amount: Decimal
    network_id: int | None = None
    metadata: str | None = None
    note_id: str | None = None
    note_title: str | None = None
    created_at: datetime

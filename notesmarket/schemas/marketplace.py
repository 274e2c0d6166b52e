from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ListingIn(BaseModel):
    """Create/update body. Update replaces every editable field, like the create form."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=500)
    content: str = Field(..., min_length=1, max_length=10000)
    price: Decimal = Field(..., gt=0)
    seller_address: str = Field(..., min_length=1)

    @field_validator("title", "content", "seller_address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PurchaseIn(BaseModel):
    listing_id: str = Field(..., min_length=1)
    tx_hash: str = Field(..., min_length=1)
    buyer_address: str = Field(..., min_length=1)
    claimed_price: Decimal = Field(..., gt=0)


class ListingView(BaseModel):
    """
    Listing projection for one viewer. content_preview is always set,
    full_content only when the viewer is entitled (seller or buyer).
    """

    id: str
    title: str
    description: str | None = None
    price: Decimal
    seller_address: str | None = None  # masked unless the viewer is the seller
    status: str
    is_active: bool
    view_count: int
    purchase_count: int
    is_owner: bool = False
    is_purchased: bool = False
    content_preview: str
    full_content: str | None = None
    created_at: datetime
    updated_at: datetime


class PurchaseHistoryView(BaseModel):
    id: str
    listing_id: str
    note_title: str | None = None
    purchase_price: Decimal
    tx_hash: str
    buyer_address: str | None = None
    seller_address: str | None = None
    purchased_at: datetime


class PurchaseResult(BaseModel):
    purchase: PurchaseHistoryView
    listing: ListingView


class PaymentAddressOut(BaseModel):
    listing_id: str
    seller_address: str

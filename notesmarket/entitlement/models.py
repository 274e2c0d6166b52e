"""
DTO entitlement: EntitlementContext (input of decide_entitlement) and EntitlementDecision.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class EntitlementContext(BaseModel):
    """Everything decide_entitlement needs about one (listing, viewer) pair."""

    viewer_id: str
    seller_id: str
    # True if a PurchaseRecord exists for (listing, viewer). Survives delisting and edits.
    has_purchase: bool = False

    model_config = {"frozen": True}


class EntitlementDecision(BaseModel):
    """Result of decide_entitlement: whether full content may be shown, and why."""

    entitled: bool = Field(..., description="True = populate full_content in the projection")
    is_owner: bool = Field(..., description="Viewer is the listing's seller")
    is_purchased: bool = Field(..., description="Viewer holds a purchase record for the listing")

    model_config = {"frozen": True}

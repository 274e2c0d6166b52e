"""
EntitlementEvaluator: gathers EntitlementContext from the purchase ledger and
renders entitlement-gated listing projections. The decision itself lives in access.py.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from notesmarket.entitlement.access import content_preview, decide_entitlement
from notesmarket.entitlement.models import EntitlementContext, EntitlementDecision
from notesmarket.models.listing import Listing
from notesmarket.models.purchase import PurchaseRecord
from notesmarket.schemas.marketplace import ListingView
from notesmarket.utils.masking import mask_for_viewer


class EntitlementEvaluator:
    def __init__(self, db: Session):
        self.db = db

    def has_purchase(self, listing_id: str, viewer_id: str) -> bool:
        return (
            self.db.query(PurchaseRecord.id)
            .filter(
                PurchaseRecord.listing_id == listing_id,
                PurchaseRecord.buyer_id == viewer_id,
            )
            .first()
            is not None
        )

    def decide(self, listing: Listing, viewer_id: str) -> EntitlementDecision:
        # The seller never needs the ledger lookup.
        has_purchase = listing.seller_id != viewer_id and self.has_purchase(listing.id, viewer_id)
        ctx = EntitlementContext(
            viewer_id=viewer_id,
            seller_id=listing.seller_id,
            has_purchase=has_purchase,
        )
        return decide_entitlement(ctx)

    def is_entitled(self, listing: Listing, viewer_id: str) -> bool:
        return self.decide(listing, viewer_id).entitled

    def view(self, listing: Listing, viewer_id: str) -> ListingView:
        return build_listing_view(listing, self.decide(listing, viewer_id))


def build_listing_view(listing: Listing, decision: EntitlementDecision) -> ListingView:
    """Project a listing for one viewer according to an already-made decision."""
    own_address = listing.seller_address if decision.is_owner else None
    return ListingView(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        price=listing.price,
        seller_address=mask_for_viewer(listing.seller_address, own_address),
        status=listing.status,
        is_active=listing.is_active,
        view_count=listing.view_count or 0,
        purchase_count=listing.purchase_count or 0,
        is_owner=decision.is_owner,
        is_purchased=decision.is_purchased,
        content_preview=content_preview(listing.content),
        full_content=listing.content if decision.entitled else None,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )

"""
MarketplaceService: the surface callers (HTTP routes) use.

Every method returns a projection, never an ORM row, so entitlement gating and
address masking cannot be skipped by a caller. Business failures are raised as
notesmarket.core.errors types and left for the boundary to map.
"""
import logging
import time

import redis
from sqlalchemy.orm import Session

from notesmarket.core.config import settings
from notesmarket.core.errors import NotFound, RateLimited, SelfPurchaseRejected, Unauthorized, Unavailable
from notesmarket.entitlement import EntitlementEvaluator
from notesmarket.models.listing import Listing
from notesmarket.schemas.marketplace import (
    ListingIn,
    ListingView,
    PaymentAddressOut,
    PurchaseHistoryView,
    PurchaseIn,
    PurchaseResult,
)
from notesmarket.services.catalog.service import CatalogService
from notesmarket.services.history.service import HistoryService
from notesmarket.services.ledger.service import PurchaseLedger
from notesmarket.utils import metrics

logger = logging.getLogger(__name__)


class MarketplaceService:
    def __init__(self, db: Session, redis_client: redis.Redis | None = None):
        self.db = db
        self.catalog = CatalogService(db)
        self.ledger = PurchaseLedger(db)
        self.history = HistoryService(db)
        self.entitlement = EntitlementEvaluator(db)
        self._redis = redis_client

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def create_listing(self, data: ListingIn, seller_id: str) -> ListingView:
        listing = self.catalog.create(
            seller_id=seller_id,
            seller_address=data.seller_address,
            title=data.title,
            description=data.description,
            content=data.content,
            price=data.price,
        )
        return self.entitlement.view(listing, seller_id)

    def list_active(self, viewer_id: str) -> list[ListingView]:
        """Active listings of other sellers, newest first."""
        listings = self.catalog.list_active(exclude_seller_id=viewer_id)
        return [self.entitlement.view(listing, viewer_id) for listing in listings]

    def get_listing(self, listing_id: str, viewer_id: str) -> ListingView:
        """Detail read. Counts as a view every time."""
        if self.catalog.get(listing_id) is None:
            raise NotFound("Marketplace note not found")
        self.catalog.increment_views(listing_id)
        metrics.listing_views_total.inc()
        listing = self.catalog.get(listing_id)
        return self.entitlement.view(listing, viewer_id)

    def my_listings(self, seller_id: str) -> list[ListingView]:
        listings = self.catalog.list_by_seller(seller_id)
        return [self.entitlement.view(listing, seller_id) for listing in listings]

    def search(self, query: str, viewer_id: str) -> list[ListingView]:
        listings = self.catalog.search(query, exclude_seller_id=viewer_id)
        return [self.entitlement.view(listing, viewer_id) for listing in listings]

    def update_listing(self, listing_id: str, data: ListingIn, actor_id: str) -> ListingView:
        listing = self._owned_listing(listing_id, actor_id, "You can only update your own notes")
        listing = self.catalog.update(listing, data.model_dump())
        logger.info("listing_updated", extra={"listing_id": listing_id, "user_id": actor_id})
        return self.entitlement.view(listing, actor_id)

    def delete_listing(self, listing_id: str, actor_id: str) -> None:
        listing = self._owned_listing(listing_id, actor_id, "You can only delete your own notes")
        self.catalog.soft_delete(listing)

    def payment_address(self, listing_id: str, viewer_id: str) -> PaymentAddressOut:
        """Unmasked seller address, handed out only to someone who may buy right now."""
        listing = self.catalog.get(listing_id)
        if listing is None:
            raise NotFound("Marketplace note not found")
        if not listing.is_active:
            raise Unavailable()
        if listing.seller_id == viewer_id:
            raise SelfPurchaseRejected()
        return PaymentAddressOut(listing_id=listing.id, seller_address=listing.seller_address)

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------

    def purchase(self, request: PurchaseIn, buyer_id: str) -> PurchaseResult:
        if not self._check_rate_limit(buyer_id):
            metrics.rate_limited_total.inc()
            raise RateLimited()

        started = time.monotonic()
        try:
            record = self.ledger.purchase(
                listing_id=request.listing_id,
                buyer_id=buyer_id,
                tx_hash=request.tx_hash,
                buyer_address=request.buyer_address,
                claimed_price=request.claimed_price,
            )
        finally:
            metrics.purchase_duration_seconds.observe(time.monotonic() - started)

        listing = self.catalog.get(record.listing_id)
        return PurchaseResult(
            purchase=self.history.render_for_buyer(record),
            listing=self.entitlement.view(listing, buyer_id),
        )

    def my_purchases(self, buyer_id: str) -> list[ListingView]:
        """Listings the buyer owns a copy of, most recent purchase first."""
        records = self.history.buyer_purchases(buyer_id)
        listings = self.catalog.list_by_ids([r.listing_id for r in records])
        views = []
        for record in records:
            listing = listings.get(record.listing_id)
            if listing is not None:
                views.append(self.entitlement.view(listing, buyer_id))
        return views

    def buyer_history(self, buyer_id: str) -> list[PurchaseHistoryView]:
        return self.history.buyer_history(buyer_id)

    def seller_history(self, seller_id: str) -> list[PurchaseHistoryView]:
        return self.history.seller_history(seller_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _owned_listing(self, listing_id: str, actor_id: str, message: str) -> Listing:
        listing = self.catalog.get(listing_id)
        if listing is None:
            raise NotFound("Marketplace note not found")
        if listing.seller_id != actor_id:
            raise Unauthorized(message)
        return listing

    def _check_rate_limit(self, buyer_id: str) -> bool:
        """At most purchase_rate_limit purchases per window, shared across replicas via Redis."""
        limit = settings.purchase_rate_limit
        if limit <= 0:
            return True
        if self._redis is None:
            self._redis = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        key = f"purchase_rate:{buyer_id}"
        try:
            current = self._redis.incr(key)
            if current == 1:
                self._redis.expire(key, settings.purchase_rate_window_seconds)
            return current <= limit
        except redis.RedisError as e:
            logger.warning("purchase_rate_limit_redis_error", extra={"error": str(e)})
            return True  # fail open: Redis outage must not block purchases

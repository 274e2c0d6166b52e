"""
CatalogService: listing storage: lookup, seller/active queries, search, save, soft delete.
Returns ORM rows; only the marketplace facade turns them into projections.
"""
import logging
from decimal import Decimal

from sqlalchemy import or_, update as sa_update
from sqlalchemy.orm import Session

from notesmarket.models.listing import Listing, ListingStatus

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "content", "price", "seller_address")


class CatalogService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, listing_id: str) -> Listing | None:
        return self.db.query(Listing).filter(Listing.id == listing_id).one_or_none()

    def get_for_update(self, listing_id: str) -> Listing | None:
        """Row lock for the rest of the transaction (PostgreSQL; no-op on SQLite)."""
        return (
            self.db.query(Listing)
            .filter(Listing.id == listing_id)
            .with_for_update()
            .one_or_none()
        )

    def list_active(self, exclude_seller_id: str | None = None) -> list[Listing]:
        query = self.db.query(Listing).filter(Listing.status == ListingStatus.ACTIVE.value)
        if exclude_seller_id is not None:
            query = query.filter(Listing.seller_id != exclude_seller_id)
        return query.order_by(Listing.created_at.desc()).all()

    def list_by_seller(self, seller_id: str) -> list[Listing]:
        """All of a seller's listings, delisted included."""
        return (
            self.db.query(Listing)
            .filter(Listing.seller_id == seller_id)
            .order_by(Listing.created_at.desc())
            .all()
        )

    def list_by_ids(self, listing_ids: list[str]) -> dict[str, Listing]:
        if not listing_ids:
            return {}
        rows = self.db.query(Listing).filter(Listing.id.in_(listing_ids)).all()
        return {row.id: row for row in rows}

    def seller_addresses(self, seller_id: str) -> list[str]:
        """Every distinct payment address the seller has put on a listing."""
        rows = (
            self.db.query(Listing.seller_address)
            .filter(Listing.seller_id == seller_id)
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def search(self, query: str, exclude_seller_id: str | None = None) -> list[Listing]:
        pattern = f"%{query}%"
        q = self.db.query(Listing).filter(
            Listing.status == ListingStatus.ACTIVE.value,
            or_(Listing.title.ilike(pattern), Listing.description.ilike(pattern)),
        )
        if exclude_seller_id is not None:
            q = q.filter(Listing.seller_id != exclude_seller_id)
        return q.order_by(Listing.created_at.desc()).all()

    def create(
        self,
        seller_id: str,
        seller_address: str,
        title: str,
        content: str,
        price: Decimal,
        description: str | None = None,
    ) -> Listing:
        listing = Listing(
            seller_id=seller_id,
            seller_address=seller_address,
            title=title,
            description=description,
            content=content,
            price=price,
            status=ListingStatus.ACTIVE.value,
            view_count=0,
            purchase_count=0,
        )
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        logger.info("listing_created", extra={"listing_id": listing.id, "user_id": seller_id})
        return listing

    def update(self, listing: Listing, data: dict) -> Listing:
        for key, value in data.items():
            if key in EDITABLE_FIELDS:
                setattr(listing, key, value)
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def soft_delete(self, listing: Listing) -> Listing:
        listing.status = ListingStatus.DELISTED.value
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        logger.info("listing_delisted", extra={"listing_id": listing.id, "user_id": listing.seller_id})
        return listing

    def increment_views(self, listing_id: str) -> None:
        """Best effort popularity counter: one SQL-side increment per read, no per-viewer dedupe."""
        self.db.execute(
            sa_update(Listing)
            .where(Listing.id == listing_id)
            .values(view_count=Listing.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def increment_purchases(self, listing_id: str) -> None:
        """Part of the purchase unit of work: no commit here."""
        self.db.execute(
            sa_update(Listing)
            .where(Listing.id == listing_id)
            .values(purchase_count=Listing.purchase_count + 1)
            .execution_options(synchronize_session=False)
        )

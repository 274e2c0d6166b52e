"""
PurchaseLedger: admission control and atomic recording of note purchases.

Responsibilities:
- Admission checks, in order: listing exists, is active, is not the buyer's own,
  not yet bought by this buyer, tx hash never seen before (purchases or transaction log)
- One unit of work for the purchase record, purchase counter, buyer's private copy
  and the linked transaction record: all of them are committed or none is
- Translating unique-constraint races into the same business outcomes as the checks
"""
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notesmarket.core.errors import (
    AlreadyPurchased,
    DuplicateTransaction,
    NotFound,
    SelfPurchaseRejected,
    Unavailable,
)
from notesmarket.db.session import unit_of_work
from notesmarket.models.listing import Listing
from notesmarket.models.purchase import PurchaseRecord
from notesmarket.services.catalog.service import CatalogService
from notesmarket.services.notes.service import NoteService
from notesmarket.services.transactions.service import TransactionService
from notesmarket.utils import metrics

logger = logging.getLogger(__name__)

PURCHASED_TITLE_SUFFIX = " (Purchased)"
PURCHASE_METADATA_PREFIX = "Marketplace purchase: "


class PurchaseLedger:
    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogService(db)
        self.notes = NoteService(db)
        self.transactions = TransactionService(db)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_purchase(self, listing_id: str, buyer_id: str) -> PurchaseRecord | None:
        return (
            self.db.query(PurchaseRecord)
            .filter(
                PurchaseRecord.listing_id == listing_id,
                PurchaseRecord.buyer_id == buyer_id,
            )
            .one_or_none()
        )

    def find_by_hash(self, tx_hash: str) -> PurchaseRecord | None:
        return (
            self.db.query(PurchaseRecord)
            .filter(PurchaseRecord.tx_hash == tx_hash)
            .one_or_none()
        )

    def hash_used(self, tx_hash: str) -> bool:
        return self.find_by_hash(tx_hash) is not None or self.transactions.exists(tx_hash)

    # ------------------------------------------------------------------
    # Purchase (atomic)
    # ------------------------------------------------------------------

    def purchase(
        self,
        listing_id: str,
        buyer_id: str,
        tx_hash: str,
        buyer_address: str,
        claimed_price: Decimal,
    ) -> PurchaseRecord:
        try:
            with unit_of_work(self.db):
                listing = self.catalog.get_for_update(listing_id)
                self._admit(listing, buyer_id, tx_hash)

                if Decimal(claimed_price) != Decimal(listing.price):
                    logger.warning(
                        "purchase_price_mismatch",
                        extra={
                            "listing_id": listing.id,
                            "claimed_price": str(claimed_price),
                            "listing_price": str(listing.price),
                        },
                    )

                record = PurchaseRecord(
                    listing_id=listing.id,
                    buyer_id=buyer_id,
                    purchase_price=listing.price,
                    tx_hash=tx_hash,
                    buyer_address=buyer_address,
                    seller_address=listing.seller_address,
                )
                self.db.add(record)
                self.db.flush()

                self.catalog.increment_purchases(listing.id)

                note_id = self.notes.create_private_copy(
                    title=listing.title + PURCHASED_TITLE_SUFFIX,
                    content=listing.content,
                    owner_id=buyer_id,
                )
                self.transactions.record(
                    tx_hash=tx_hash,
                    sender_address=buyer_address,
                    recipient_address=listing.seller_address,
                    amount=claimed_price,
                    user_id=buyer_id,
                    note_id=note_id,
                    metadata=PURCHASE_METADATA_PREFIX + listing.title,
                )
        except IntegrityError as exc:
            # A concurrent purchase committed first; the rollback above left nothing behind.
            error = self._conflict_outcome(listing_id, buyer_id, tx_hash)
            if error is None:
                raise
            logger.warning(
                "purchase_conflict",
                extra={"listing_id": listing_id, "user_id": buyer_id, "tx_hash": tx_hash, "reason": error.code},
            )
            metrics.purchases_total.labels(outcome=error.code).inc()
            raise error from exc

        metrics.purchases_total.labels(outcome="completed").inc()
        logger.info(
            "purchase_completed",
            extra={
                "purchase_id": record.id,
                "listing_id": listing_id,
                "user_id": buyer_id,
                "tx_hash": tx_hash,
                "note_id": note_id,
            },
        )
        return record

    def _admit(self, listing: Listing | None, buyer_id: str, tx_hash: str) -> None:
        """Raise the first failing precondition. Order is part of the contract."""
        error = None
        if listing is None:
            error = NotFound("Marketplace note not found")
        elif not listing.is_active:
            error = Unavailable()
        elif listing.seller_id == buyer_id:
            error = SelfPurchaseRejected()
        elif self.find_purchase(listing.id, buyer_id) is not None:
            error = AlreadyPurchased()
        elif self.hash_used(tx_hash):
            error = DuplicateTransaction()

        if error is not None:
            logger.info(
                "purchase_rejected",
                extra={
                    "listing_id": listing.id if listing is not None else None,
                    "user_id": buyer_id,
                    "tx_hash": tx_hash,
                    "reason": error.code,
                },
            )
            metrics.purchases_total.labels(outcome=error.code).inc()
            raise error

    def _conflict_outcome(self, listing_id: str, buyer_id: str, tx_hash: str):
        if self.find_purchase(listing_id, buyer_id) is not None:
            return AlreadyPurchased()
        if self.hash_used(tx_hash):
            return DuplicateTransaction()
        return None

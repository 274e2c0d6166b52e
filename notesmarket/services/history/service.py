"""
HistoryService: buyer and seller views over the purchase ledger.

Buyers are matched to purchases only through the transaction log (tx hash owned
by the buyer), sellers through the payment addresses on their listings. Every
address goes through mask_for_viewer: the viewer's own side in full, the
counterparty always masked.
"""
from sqlalchemy.orm import Session

from notesmarket.models.purchase import PurchaseRecord
from notesmarket.models.transaction import TransactionRecord
from notesmarket.schemas.marketplace import PurchaseHistoryView
from notesmarket.services.catalog.service import CatalogService
from notesmarket.utils.masking import mask_for_viewer


class HistoryService:
    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogService(db)

    def buyer_purchases(self, buyer_id: str) -> list[PurchaseRecord]:
        """Purchases whose tx hash appears among the buyer's own transaction records, newest first."""
        return (
            self.db.query(PurchaseRecord)
            .join(TransactionRecord, TransactionRecord.tx_hash == PurchaseRecord.tx_hash)
            .filter(TransactionRecord.user_id == buyer_id)
            .order_by(PurchaseRecord.purchased_at.desc())
            .all()
        )

    def seller_sales(self, seller_id: str) -> list[PurchaseRecord]:
        """
        Purchases paid to any address the seller ever listed with, newest first.
        The IN filter yields each record once even if an address repeats across listings.
        """
        addresses = self.catalog.seller_addresses(seller_id)
        if not addresses:
            return []
        return (
            self.db.query(PurchaseRecord)
            .filter(PurchaseRecord.seller_address.in_(addresses))
            .order_by(PurchaseRecord.purchased_at.desc())
            .all()
        )

    def buyer_history(self, buyer_id: str) -> list[PurchaseHistoryView]:
        records = self.buyer_purchases(buyer_id)
        return self._render(records, buyer_view=True)

    def seller_history(self, seller_id: str) -> list[PurchaseHistoryView]:
        records = self.seller_sales(seller_id)
        return self._render(records, buyer_view=False)

    def render_for_buyer(self, record: PurchaseRecord) -> PurchaseHistoryView:
        return self._render([record], buyer_view=True)[0]

    def _render(self, records: list[PurchaseRecord], buyer_view: bool) -> list[PurchaseHistoryView]:
        listings = self.catalog.list_by_ids(list({r.listing_id for r in records}))
        views = []
        for record in records:
            if buyer_view:
                # None never matches a real address: the seller side is always masked.
                buyer_address = mask_for_viewer(record.buyer_address, record.buyer_address)
                seller_address = mask_for_viewer(record.seller_address, None)
            else:
                seller_address = mask_for_viewer(record.seller_address, record.seller_address)
                buyer_address = mask_for_viewer(record.buyer_address, None)
            listing = listings.get(record.listing_id)
            views.append(
                PurchaseHistoryView(
                    id=record.id,
                    listing_id=record.listing_id,
                    note_title=listing.title if listing else None,
                    purchase_price=record.purchase_price,
                    tx_hash=record.tx_hash,
                    buyer_address=buyer_address,
                    seller_address=seller_address,
                    purchased_at=record.purchased_at,
                )
            )
        return views

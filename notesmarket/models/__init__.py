from notesmarket.models.listing import Listing, ListingStatus
from notesmarket.models.note import Note
from notesmarket.models.purchase import PurchaseRecord
from notesmarket.models.transaction import TransactionRecord

__all__ = [
    "Listing",
    "ListingStatus",
    "Note",
    "PurchaseRecord",
    "TransactionRecord",
]

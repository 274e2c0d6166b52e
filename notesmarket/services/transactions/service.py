"""
TransactionService: append-only log of claimed payments, keyed by tx hash.

Responsibilities:
- Existence/lookup by hash (used by the purchase ledger)
- Recording standalone payments, idempotent on the hash
- Owner-scoped transaction history with masked counterparties
"""
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notesmarket.core.errors import DuplicateTransaction, NotFound, Unauthorized
from notesmarket.db.session import unit_of_work
from notesmarket.models.note import Note
from notesmarket.models.transaction import TransactionRecord
from notesmarket.schemas.transactions import TransactionIn, TransactionView
from notesmarket.utils.masking import mask_for_viewer

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Log primitives
    # ------------------------------------------------------------------

    def exists(self, tx_hash: str) -> bool:
        return (
            self.db.query(TransactionRecord.id)
            .filter(TransactionRecord.tx_hash == tx_hash)
            .first()
            is not None
        )

    def get_by_hash(self, tx_hash: str) -> TransactionRecord | None:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.tx_hash == tx_hash)
            .one_or_none()
        )

    def hashes_for_user(self, user_id: str) -> list[str]:
        rows = (
            self.db.query(TransactionRecord.tx_hash)
            .filter(TransactionRecord.user_id == user_id)
            .all()
        )
        return [row[0] for row in rows]

    def record(
        self,
        tx_hash: str,
        sender_address: str,
        recipient_address: str,
        amount: Decimal,
        user_id: str,
        note_id: str | None = None,
        network_id: int | None = None,
        metadata: str | None = None,
    ) -> TransactionRecord:
        """Add a record to the current transaction. Flush only, the caller commits."""
        record = TransactionRecord(
            tx_hash=tx_hash,
            sender_address=sender_address,
            recipient_address=recipient_address,
            amount=amount,
            user_id=user_id,
            note_id=note_id,
            network_id=network_id,
            tx_metadata=metadata,
        )
        self.db.add(record)
        self.db.flush()
        return record

    # ------------------------------------------------------------------
    # Owner-facing operations
    # ------------------------------------------------------------------

    def create_transaction(self, request: TransactionIn, user_id: str) -> TransactionView:
        if self.exists(request.tx_hash):
            raise DuplicateTransaction("Transaction with this hash already exists")

        if request.note_id is not None:
            self._owned_note(request.note_id, user_id)

        try:
            with unit_of_work(self.db):
                record = self.record(
                    tx_hash=request.tx_hash,
                    sender_address=request.sender_address,
                    recipient_address=request.recipient_address,
                    amount=request.amount,
                    user_id=user_id,
                    note_id=request.note_id,
                    network_id=request.network_id,
                    metadata=request.metadata,
                )
        except IntegrityError as exc:
            logger.warning("transaction_duplicate", extra={"tx_hash": request.tx_hash})
            raise DuplicateTransaction("Transaction with this hash already exists") from exc

        logger.info(
            "transaction_recorded",
            extra={"tx_hash": record.tx_hash, "user_id": user_id, "note_id": record.note_id},
        )
        return self.to_view(record)

    def list_user_transactions(self, user_id: str) -> list[TransactionView]:
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.created_at.desc())
            .all()
        )
        return [self.to_view(r) for r in records]

    def get_transaction(self, tx_hash: str, user_id: str) -> TransactionView:
        record = self.get_by_hash(tx_hash)
        if not record:
            raise NotFound("Transaction not found")
        if record.user_id != user_id:
            raise Unauthorized("Transaction does not belong to user")
        return self.to_view(record)

    def note_transactions(self, note_id: str, user_id: str) -> list[TransactionView]:
        self._owned_note(note_id, user_id)
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.note_id == note_id)
            .order_by(TransactionRecord.created_at.desc())
            .all()
        )
        return [self.to_view(r) for r in records]

    def to_view(self, record: TransactionRecord) -> TransactionView:
        # The owner paid, so the sender address is the owner's own.
        own_address = record.sender_address
        note_title = None
        if record.note_id:
            note = self.db.query(Note).filter(Note.id == record.note_id).one_or_none()
            note_title = note.title if note else None
        return TransactionView(
            id=record.id,
            tx_hash=record.tx_hash,
            sender_address=mask_for_viewer(record.sender_address, own_address),
            recipient_address=mask_for_viewer(record.recipient_address, own_address),
            amount=record.amount,
            network_id=record.network_id,
            metadata=record.tx_metadata,
            note_id=record.note_id,
            note_title=note_title,
            created_at=record.created_at,
        )

    def _owned_note(self, note_id: str, user_id: str) -> Note:
        note = self.db.query(Note).filter(Note.id == note_id).one_or_none()
        if not note:
            raise NotFound("Note not found")
        if note.user_id != user_id:
            raise Unauthorized("Note does not belong to user")
        return note

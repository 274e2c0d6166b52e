"""Tests for TransactionService: owner scoping, hash uniqueness, masked counterparties."""
from decimal import Decimal

import pytest

from notesmarket.core.errors import DuplicateTransaction, NotFound, Unauthorized
from notesmarket.schemas.transactions import TransactionIn
from notesmarket.services.notes.service import NoteService
from notesmarket.services.transactions.service import TransactionService
from notesmarket.utils.masking import mask

from conftest import BUYER_ADDRESS, SELLER_ADDRESS


def _tx_in(tx_hash="tx-standalone", note_id=None, amount=Decimal("2.5")):
    return TransactionIn(
        tx_hash=tx_hash,
        sender_address=BUYER_ADDRESS,
        recipient_address=SELLER_ADDRESS,
        amount=amount,
        note_id=note_id,
        network_id=0,
        metadata="tip",
    )


def test_create_transaction_masks_recipient_only(db):
    view = TransactionService(db).create_transaction(_tx_in(), "user-1")

    assert view.tx_hash == "tx-standalone"
    assert view.sender_address == BUYER_ADDRESS
    assert view.recipient_address == mask(SELLER_ADDRESS)
    assert view.amount == Decimal("2.5")
    assert view.metadata == "tip"


def test_duplicate_hash_rejected(db):
    svc = TransactionService(db)
    svc.create_transaction(_tx_in(), "user-1")

    with pytest.raises(DuplicateTransaction):
        svc.create_transaction(_tx_in(), "user-2")


def test_attached_note_must_belong_to_user(db):
    note = NoteService(db).create_note("owner", "Mine", "body")
    svc = TransactionService(db)

    with pytest.raises(Unauthorized):
        svc.create_transaction(_tx_in(note_id=note.id), "intruder")
    with pytest.raises(NotFound):
        svc.create_transaction(_tx_in(note_id="missing"), "owner")
    assert svc.exists("tx-standalone") is False


def test_note_title_resolved_in_view(db):
    note = NoteService(db).create_note("owner", "Mine", "body")
    view = TransactionService(db).create_transaction(_tx_in(note_id=note.id), "owner")
    assert view.note_title == "Mine"


def test_get_transaction_scoped_to_owner(db):
    svc = TransactionService(db)
    svc.create_transaction(_tx_in(), "user-1")

    assert svc.get_transaction("tx-standalone", "user-1").tx_hash == "tx-standalone"
    with pytest.raises(Unauthorized):
        svc.get_transaction("tx-standalone", "user-2")
    with pytest.raises(NotFound):
        svc.get_transaction("nope", "user-1")


def test_list_user_transactions(db):
    svc = TransactionService(db)
    svc.create_transaction(_tx_in(tx_hash="a"), "user-1")
    svc.create_transaction(_tx_in(tx_hash="b"), "user-1")
    svc.create_transaction(_tx_in(tx_hash="c"), "user-2")

    assert sorted(v.tx_hash for v in svc.list_user_transactions("user-1")) == ["a", "b"]
    assert svc.hashes_for_user("user-2") == ["c"]


def test_note_transactions_requires_ownership(db):
    note = NoteService(db).create_note("owner", "Mine", "body")
    svc = TransactionService(db)
    svc.create_transaction(_tx_in(note_id=note.id), "owner")

    assert [v.tx_hash for v in svc.note_transactions(note.id, "owner")] == ["tx-standalone"]
    with pytest.raises(Unauthorized):
        svc.note_transactions(note.id, "intruder")

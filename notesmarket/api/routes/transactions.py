from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from notesmarket.api.deps import get_current_user_id
from notesmarket.db.session import get_db
from notesmarket.schemas.transactions import TransactionIn, TransactionView
from notesmarket.services.transactions.service import TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionView, status_code=status.HTTP_201_CREATED)
def create_transaction(
    body: TransactionIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TransactionView:
    return TransactionService(db).create_transaction(body, user_id)


@router.get("", response_model=list[TransactionView])
def list_transactions(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[TransactionView]:
    return TransactionService(db).list_user_transactions(user_id)


@router.get("/note/{note_id}", response_model=list[TransactionView])
def note_transactions(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[TransactionView]:
    return TransactionService(db).note_transactions(note_id, user_id)


@router.get("/{tx_hash}", response_model=TransactionView)
def get_transaction(
    tx_hash: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TransactionView:
    return TransactionService(db).get_transaction(tx_hash, user_id)

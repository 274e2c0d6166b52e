from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from notesmarket.api.deps import get_current_user_id
from notesmarket.db.session import get_db
from notesmarket.schemas.notes import NoteIn, NoteOut
from notesmarket.services.notes.service import NoteService


router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut])
def list_notes(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[NoteOut]:
    return [NoteOut.model_validate(n) for n in NoteService(db).list_notes(user_id)]


@router.get("/search", response_model=list[NoteOut])
def search_notes(
    title: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[NoteOut]:
    return [NoteOut.model_validate(n) for n in NoteService(db).search_notes(user_id, title)]


@router.get("/{note_id}", response_model=NoteOut)
def get_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> NoteOut:
    return NoteOut.model_validate(NoteService(db).get_note(note_id, user_id))


@router.post("", response_model=NoteOut)
def create_note(
    body: NoteIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> NoteOut:
    return NoteOut.model_validate(NoteService(db).create_note(user_id, body.title, body.content))


@router.put("/{note_id}", response_model=NoteOut)
def update_note(
    note_id: str,
    body: NoteIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> NoteOut:
    note = NoteService(db).update_note(note_id, user_id, body.title, body.content)
    return NoteOut.model_validate(note)


@router.delete("/{note_id}")
def delete_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    NoteService(db).delete_note(note_id, user_id)
    return {"message": "Note deleted successfully"}

import logging

from sqlalchemy.orm import Session

from notesmarket.core.errors import NotFound
from notesmarket.models.note import Note

logger = logging.getLogger(__name__)


class NoteService:
    """Personal notes, always scoped to their owner. Another user's note is reported as missing."""

    def __init__(self, db: Session):
        self.db = db

    def list_notes(self, user_id: str) -> list[Note]:
        return (
            self.db.query(Note)
            .filter(Note.user_id == user_id)
            .order_by(Note.created_at.desc())
            .all()
        )

    def get_note(self, note_id: str, user_id: str) -> Note:
        note = (
            self.db.query(Note)
            .filter(Note.id == note_id, Note.user_id == user_id)
            .one_or_none()
        )
        if not note:
            raise NotFound("Note not found or you don't have permission to access it")
        return note

    def find(self, note_id: str) -> Note | None:
        return self.db.query(Note).filter(Note.id == note_id).one_or_none()

    def create_note(self, user_id: str, title: str, content: str) -> Note:
        note = Note(user_id=user_id, title=title, content=content)
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def create_private_copy(self, title: str, content: str, owner_id: str) -> str:
        """
        Buyer's copy of purchased content. Flushes only: the caller's unit of work
        owns the commit, so the copy appears together with its purchase or not at all.
        """
        note = Note(user_id=owner_id, title=title, content=content)
        self.db.add(note)
        self.db.flush()
        return note.id

    def update_note(self, note_id: str, user_id: str, title: str, content: str) -> Note:
        note = self.get_note(note_id, user_id)
        note.title = title
        note.content = content
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def delete_note(self, note_id: str, user_id: str) -> None:
        note = self.get_note(note_id, user_id)
        self.db.delete(note)
        self.db.commit()
        logger.info("note_deleted", extra={"note_id": note_id, "user_id": user_id})

    def search_notes(self, user_id: str, title: str) -> list[Note]:
        return (
            self.db.query(Note)
            .filter(Note.user_id == user_id, Note.title.ilike(f"%{title}%"))
            .order_by(Note.created_at.desc())
            .all()
        )

"""
Principal resolution. Authentication happens upstream; the gateway forwards the
authenticated principal id in a trusted header (settings.principal_header).
"""
from fastapi import HTTPException, Request, status

from notesmarket.core.config import settings


def get_current_user_id(request: Request) -> str:
    user_id = (request.headers.get(settings.principal_header) or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authenticated principal",
        )
    return user_id

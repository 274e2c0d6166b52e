"""
Entitlement config: typed wrapper over notesmarket.core.config for preview rendering.
"""
from __future__ import annotations

from notesmarket.core.config import settings

PREVIEW_ELLIPSIS = "..."


def get_content_preview_length() -> int:
    return getattr(settings, "content_preview_length", 200)

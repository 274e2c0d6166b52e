"""
Decision only: decide_entitlement(ctx) -> EntitlementDecision, content_preview(content) -> str.
Pure functions, no I/O. The evaluator gathers the context from the database.
"""
from __future__ import annotations

from notesmarket.entitlement.config import PREVIEW_ELLIPSIS, get_content_preview_length
from notesmarket.entitlement.models import EntitlementContext, EntitlementDecision


def decide_entitlement(ctx: EntitlementContext) -> EntitlementDecision:
    """
    Full content is shown to exactly two kinds of viewers:
    - the seller of the listing
    - a viewer holding a purchase record for it
    Everyone else gets the preview only.
    """
    is_owner = ctx.viewer_id == ctx.seller_id
    return EntitlementDecision(
        entitled=is_owner or ctx.has_purchase,
        is_owner=is_owner,
        is_purchased=ctx.has_purchase,
    )


def content_preview(content: str | None) -> str:
    """
    First N characters, ellipsis-suffixed when cut. Slicing a str counts
    code points, so multi-byte text is never split mid-character.
    """
    if not content:
        return ""
    limit = get_content_preview_length()
    if len(content) <= limit:
        return content
    return content[:limit] + PREVIEW_ELLIPSIS

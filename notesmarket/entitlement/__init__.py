"""
Entitlement: who may see a listing's full content.
Decision (access) and data gathering (evaluator) are split; contract via EntitlementContext.
"""
from notesmarket.entitlement.access import content_preview, decide_entitlement
from notesmarket.entitlement.evaluator import EntitlementEvaluator, build_listing_view
from notesmarket.entitlement.models import EntitlementContext, EntitlementDecision

__all__ = [
    "EntitlementContext",
    "EntitlementDecision",
    "EntitlementEvaluator",
    "build_listing_view",
    "content_preview",
    "decide_entitlement",
]

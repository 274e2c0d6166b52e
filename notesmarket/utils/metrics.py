"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
purchases_total = Counter(
    "purchases_total",
    "Purchase attempts by outcome",
    ["outcome"],  # completed, not_found, unavailable, already_purchased, ...
)

listing_views_total = Counter(
    "listing_views_total",
    "Total listing detail reads",
)

rate_limited_total = Counter(
    "purchase_rate_limited_total",
    "Purchases rejected by the per-buyer rate limit",
)

# Histograms
purchase_duration_seconds = Histogram(
    "purchase_duration_seconds",
    "Purchase processing duration (admission + commit)",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5],
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )

"""
Main FastAPI application for the Notes Marketplace API.
Serves health, marketplace, transactions, personal notes and metrics.
"""
import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notesmarket.core.config import settings
from notesmarket.core.errors import MarketplaceError
from notesmarket.core.logging import configure_logging
from notesmarket.db.session import init_schema
from notesmarket.api.routes import health, marketplace, notes, transactions
from notesmarket.utils.metrics import router as metrics_router

logger = logging.getLogger("notesmarket.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.auto_create_schema:
        init_schema()
    yield


app = FastAPI(
    title="Notes Marketplace API",
    description="Listings, purchases and masked purchase history for digital notes",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
origins = settings.cors_origins_list
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5137"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    request_id = request.headers.get(settings.request_id_header) or str(uuid4())
    started = time.monotonic()
    response = await call_next(request)
    response.headers[settings.request_id_header] = request_id
    logger.info(
        "request_completed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "latency_ms": round((time.monotonic() - started) * 1000, 1),
        },
    )
    return response


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


# Routers
app.include_router(health.router, tags=["health"])
app.include_router(marketplace.router)
app.include_router(transactions.router)
app.include_router(notes.router)
app.include_router(metrics_router)

"""Shared fixtures: an isolated in-memory SQLite database per test."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("PURCHASE_RATE_LIMIT", "0")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notesmarket.db.base import Base
import notesmarket.models  # noqa: F401

SELLER_ADDRESS = "addr_test1qseller0000000000000000000000000000000000sellerend"
BUYER_ADDRESS = "addr_test1qbuyer00000000000000000000000000000000000buyerend"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_listing(db):
    from notesmarket.services.catalog.service import CatalogService

    def _make(
        seller_id="seller-1",
        seller_address=SELLER_ADDRESS,
        title="Linear algebra notes",
        content="Eigenvalues and eigenvectors.",
        price=Decimal("10"),
        description="Lecture 1-5",
    ):
        return CatalogService(db).create(
            seller_id=seller_id,
            seller_address=seller_address,
            title=title,
            content=content,
            price=price,
            description=description,
        )

    return _make

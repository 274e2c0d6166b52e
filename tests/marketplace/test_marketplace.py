"""Tests for MarketplaceService: projections, ownership checks, views, rate limit."""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import redis

from notesmarket.core.errors import (
    NotFound,
    RateLimited,
    SelfPurchaseRejected,
    Unauthorized,
    Unavailable,
)
from notesmarket.schemas.marketplace import ListingIn, PurchaseIn
from notesmarket.services.marketplace.service import MarketplaceService
from notesmarket.utils.masking import mask

from conftest import BUYER_ADDRESS, SELLER_ADDRESS

LONG_CONTENT = "x" * 250


def _listing_in(**kwargs):
    data = {
        "title": "Organic chemistry",
        "description": "Reaction mechanisms",
        "content": LONG_CONTENT,
        "price": Decimal("10"),
        "seller_address": SELLER_ADDRESS,
    }
    data.update(kwargs)
    return ListingIn(**data)


def _purchase_in(listing_id, tx_hash="tx1"):
    return PurchaseIn(
        listing_id=listing_id,
        tx_hash=tx_hash,
        buyer_address=BUYER_ADDRESS,
        claimed_price=Decimal("10"),
    )


class TestListingProjections:
    def test_seller_sees_full_content_and_own_address(self, db):
        svc = MarketplaceService(db)
        view = svc.create_listing(_listing_in(), "S")

        assert view.is_owner is True
        assert view.full_content == LONG_CONTENT
        assert view.content_preview == "x" * 200 + "..."
        assert view.seller_address == SELLER_ADDRESS
        assert view.status == "active"

    def test_stranger_sees_preview_and_masked_address(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")

        view = svc.get_listing(created.id, "B")
        assert view.full_content is None
        assert view.content_preview == "x" * 200 + "..."
        assert view.seller_address == mask(SELLER_ADDRESS)
        assert view.is_purchased is False

    def test_list_active_excludes_own_and_delisted(self, db):
        svc = MarketplaceService(db)
        mine = svc.create_listing(_listing_in(title="Mine"), "B")
        theirs = svc.create_listing(_listing_in(title="Theirs"), "S")
        gone = svc.create_listing(_listing_in(title="Gone"), "S")
        svc.delete_listing(gone.id, "S")

        ids = [v.id for v in svc.list_active("B")]
        assert ids == [theirs.id]
        assert mine.id not in ids

    def test_search_matches_title_or_description_case_insensitive(self, db):
        svc = MarketplaceService(db)
        by_title = svc.create_listing(_listing_in(title="Quantum Basics", description=None), "S")
        by_desc = svc.create_listing(_listing_in(title="Physics", description="intro to QUANTUM"), "S")
        svc.create_listing(_listing_in(title="Biology", description="cells"), "S")
        svc.create_listing(_listing_in(title="Quantum own"), "B")

        ids = {v.id for v in svc.search("quantum", "B")}
        assert ids == {by_title.id, by_desc.id}

    def test_my_listings_include_delisted(self, db):
        svc = MarketplaceService(db)
        a = svc.create_listing(_listing_in(title="A"), "S")
        svc.create_listing(_listing_in(title="B"), "S")
        svc.delete_listing(a.id, "S")

        views = svc.my_listings("S")
        assert len(views) == 2
        assert {v.status for v in views} == {"active", "delisted"}

    def test_every_read_increments_view_count(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")

        svc.get_listing(created.id, "B")
        svc.get_listing(created.id, "B")
        view = svc.get_listing(created.id, "C")

        assert view.view_count == 3

    def test_get_missing_listing(self, db):
        with pytest.raises(NotFound):
            MarketplaceService(db).get_listing("missing", "B")


class TestOwnership:
    def test_update_by_other_user_rejected(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        with pytest.raises(Unauthorized):
            svc.update_listing(created.id, _listing_in(title="Hijack"), "B")

    def test_delete_by_other_user_rejected(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        with pytest.raises(Unauthorized):
            svc.delete_listing(created.id, "B")

    def test_update_missing_listing(self, db):
        with pytest.raises(NotFound):
            MarketplaceService(db).update_listing("missing", _listing_in(), "S")

    def test_seller_updates_listing(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        view = svc.update_listing(created.id, _listing_in(title="Renamed", price=Decimal("3")), "S")
        assert view.title == "Renamed"
        assert view.price == Decimal("3")


class TestPaymentAddress:
    def test_buyer_gets_unmasked_address(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        assert svc.payment_address(created.id, "B").seller_address == SELLER_ADDRESS

    def test_seller_rejected(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        with pytest.raises(SelfPurchaseRejected):
            svc.payment_address(created.id, "S")

    def test_delisted_rejected(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        svc.delete_listing(created.id, "S")
        with pytest.raises(Unavailable):
            svc.payment_address(created.id, "B")


class TestPurchaseFlow:
    def test_purchase_returns_buyer_projection(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")

        result = svc.purchase(_purchase_in(created.id), "B")

        assert result.purchase.tx_hash == "tx1"
        assert result.purchase.buyer_address == BUYER_ADDRESS
        assert result.purchase.seller_address == mask(SELLER_ADDRESS)
        assert result.listing.full_content == LONG_CONTENT
        assert result.listing.is_purchased is True
        assert result.listing.purchase_count == 1

    def test_my_purchases_lists_bought_listings(self, db):
        svc = MarketplaceService(db)
        bought = svc.create_listing(_listing_in(title="Bought"), "S")
        svc.create_listing(_listing_in(title="Not bought"), "S")
        svc.purchase(_purchase_in(bought.id), "B")

        views = svc.my_purchases("B")
        assert [v.id for v in views] == [bought.id]
        assert views[0].full_content == LONG_CONTENT

    def test_histories_through_facade(self, db):
        svc = MarketplaceService(db)
        created = svc.create_listing(_listing_in(), "S")
        svc.purchase(_purchase_in(created.id), "B")

        assert [v.tx_hash for v in svc.buyer_history("B")] == ["tx1"]
        assert [v.tx_hash for v in svc.seller_history("S")] == ["tx1"]


class TestRateLimit:
    @patch("notesmarket.services.marketplace.service.settings")
    def test_over_limit_rejected_before_ledger(self, mock_settings, db):
        mock_settings.purchase_rate_limit = 3
        mock_settings.purchase_rate_window_seconds = 60
        client = MagicMock()
        client.incr.return_value = 4
        svc = MarketplaceService(db, redis_client=client)
        svc.ledger = MagicMock()

        with pytest.raises(RateLimited):
            svc.purchase(_purchase_in("any"), "B")
        svc.ledger.purchase.assert_not_called()

    @patch("notesmarket.services.marketplace.service.settings")
    def test_first_hit_sets_window(self, mock_settings, db):
        mock_settings.purchase_rate_limit = 3
        mock_settings.purchase_rate_window_seconds = 60
        client = MagicMock()
        client.incr.return_value = 1
        svc = MarketplaceService(db, redis_client=client)

        assert svc._check_rate_limit("B") is True
        client.expire.assert_called_once_with("purchase_rate:B", 60)

    @patch("notesmarket.services.marketplace.service.settings")
    def test_redis_outage_fails_open(self, mock_settings, db):
        mock_settings.purchase_rate_limit = 3
        client = MagicMock()
        client.incr.side_effect = redis.ConnectionError("down")
        svc = MarketplaceService(db, redis_client=client)

        assert svc._check_rate_limit("B") is True

    @patch("notesmarket.services.marketplace.service.settings")
    def test_disabled_limit_skips_redis(self, mock_settings, db):
        mock_settings.purchase_rate_limit = 0
        client = MagicMock()
        svc = MarketplaceService(db, redis_client=client)

        assert svc._check_rate_limit("B") is True
        client.incr.assert_not_called()

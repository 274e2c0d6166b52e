"""
Unit tests for decide_entitlement and content_preview: pure logic, no database.
"""
import unittest
from unittest.mock import patch

from notesmarket.entitlement.access import content_preview, decide_entitlement
from notesmarket.entitlement.models import EntitlementContext


class TestDecideEntitlement(unittest.TestCase):
    """Who gets full content."""

    def test_seller_is_entitled(self):
        ctx = EntitlementContext(viewer_id="s1", seller_id="s1", has_purchase=False)
        decision = decide_entitlement(ctx)
        self.assertTrue(decision.entitled)
        self.assertTrue(decision.is_owner)
        self.assertFalse(decision.is_purchased)

    def test_buyer_with_purchase_is_entitled(self):
        ctx = EntitlementContext(viewer_id="b1", seller_id="s1", has_purchase=True)
        decision = decide_entitlement(ctx)
        self.assertTrue(decision.entitled)
        self.assertFalse(decision.is_owner)
        self.assertTrue(decision.is_purchased)

    def test_stranger_gets_preview_only(self):
        ctx = EntitlementContext(viewer_id="x1", seller_id="s1")
        decision = decide_entitlement(ctx)
        self.assertFalse(decision.entitled)
        self.assertFalse(decision.is_owner)
        self.assertFalse(decision.is_purchased)


class TestContentPreview(unittest.TestCase):
    """Preview is the first 200 characters, ellipsis when cut."""

    def test_short_content_verbatim(self):
        self.assertEqual(content_preview("0123456789"), "0123456789")

    def test_exactly_200_chars_verbatim(self):
        content = "a" * 200
        self.assertEqual(content_preview(content), content)

    def test_250_chars_truncated_with_ellipsis(self):
        content = "".join(chr(ord("a") + i % 26) for i in range(250))
        self.assertEqual(content_preview(content), content[:200] + "...")

    def test_counts_characters_not_bytes(self):
        content = "ж" * 150 + "🙂" * 100
        preview = content_preview(content)
        self.assertEqual(preview, "ж" * 150 + "🙂" * 50 + "...")
        preview.encode("utf-8")  # no split surrogate / partial code point

    def test_empty_content(self):
        self.assertEqual(content_preview(""), "")
        self.assertEqual(content_preview(None), "")

    @patch("notesmarket.entitlement.access.get_content_preview_length", return_value=5)
    def test_preview_length_from_config(self, *_):
        self.assertEqual(content_preview("abcdefgh"), "abcde...")

"""Tests for the field_resolver module.

Tests cover:
- Exact and relaxed (case/whitespace/NBSP) column lookup
- First-non-empty candidate lookup
- SKU normalization (join key) and its idempotence
- Coercions: lists, attachments, checkboxes, slugs
"""

import pytest

from src.content_engine.field_resolver import (
    as_list,
    first_attachment_url,
    get_field,
    get_first_of,
    is_truthy,
    normalize_sku,
    normalize_text,
    slugify,
)


# === Test: Column lookup ===


class TestGetField:
    def test_exact_match(self):
        assert get_field({"Product SKU": "A1"}, "Product SKU") == "A1"

    def test_case_insensitive(self):
        assert get_field({"product sku": "A1"}, "Product SKU") == "A1"

    def test_whitespace_and_nbsp_collapse(self):
        row = {"Product\u00a0 SKU ": "A1"}
        assert get_field(row, "product sku") == "A1"

    def test_exact_match_wins(self):
        row = {"sku": "lower", "SKU": "upper"}
        assert get_field(row, "SKU") == "upper"

    def test_missing_returns_none(self):
        assert get_field({"Name": "x"}, "SKU") is None


class TestGetFirstOf:
    def test_first_non_empty_candidate(self):
        row = {"SKU": "", "Product SKU": "  ", "Code": "C-9"}
        assert get_first_of(row, ["SKU", "Product SKU", "Code", "ID"]) == "C-9"

    def test_candidate_order(self):
        row = {"ID": "id-1", "Code": "code-1"}
        assert get_first_of(row, ["Code", "ID"]) == "code-1"

    def test_none_when_all_empty(self):
        assert get_first_of({"SKU": None}, ["SKU", "Code"]) is None


# === Test: SKU normalization ===


class TestNormalizeSku:
    def test_documented_examples(self):
        assert normalize_sku("sku 123") == "SKU_123"
        assert normalize_sku("SKU_123") == "SKU_123"

    def test_whitespace_runs(self):
        assert normalize_sku("  tent \t 2  person ") == "TENT_2_PERSON"

    @pytest.mark.parametrize("value", ["sku 123", " a  b ", "Æble-1", "", "x y", "MiXeD_case"])
    def test_idempotent(self, value):
        once = normalize_sku(value)
        assert normalize_sku(once) == once

    def test_none(self):
        assert normalize_sku(None) == ""


# === Test: Coercions ===


class TestCoercions:
    def test_normalize_text_list(self):
        assert normalize_text(["a", " b ", ""]) == "a, b"

    def test_as_list_from_string(self):
        assert as_list("camping, hiking,, ") == ["camping", "hiking"]

    def test_as_list_from_list(self):
        assert as_list(["camping", " "]) == ["camping"]

    def test_as_list_empty(self):
        assert as_list(None) == []

    def test_attachment_descriptor(self):
        value = [{"url": "https://img.test/a.jpg"}, {"url": "https://img.test/b.jpg"}]
        assert first_attachment_url(value) == "https://img.test/a.jpg"

    def test_attachment_plain_url(self):
        assert first_attachment_url(" https://img.test/a.jpg ") == "https://img.test/a.jpg"

    def test_attachment_rendered_as_string(self):
        value = "hero.jpg (https://dl.airtable.test/hero.jpg)"
        assert first_attachment_url(value) == "https://dl.airtable.test/hero.jpg"

    def test_attachment_not_a_url(self):
        assert first_attachment_url("hero.jpg") == ""

    @pytest.mark.parametrize("value,expected", [
        (True, True),
        (False, False),
        ("checked", True),
        ("Yes", True),
        ("1", True),
        ("", False),
        ("no", False),
        (None, False),
    ])
    def test_is_truthy(self, value, expected):
        assert is_truthy(value) is expected


class TestSlugify:
    def test_basic(self):
        assert slugify("Best Tents of 2025!") == "best-tents-of-2025"

    def test_accents_stripped(self):
        assert slugify("Café Crème") == "cafe-creme"

    def test_trims_hyphens(self):
        assert slugify("--Hello--World--") == "hello-world"

    def test_empty(self):
        assert slugify(None) == ""

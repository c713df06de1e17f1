"""Tests for token grammars and scanning.

Tests cover:
- Bare and parametrized grammars (whitespace tolerance, SKU charset)
- Option parsing (first '=' splits, segments without '=' ignored)
- Document order, per-grammar scans and nested tokens
- Line numbers
"""

import pytest

from src.content_engine.affiliate_injector.tokens import (
    TokenKind,
    line_number,
    parse_options,
    scan_tokens,
)


# === Test: Option parsing ===


class TestParseOptions:
    def test_pairs(self):
        assert parse_options("|as=card|text=Buy now") == {"as": "card", "text": "Buy now"}

    def test_first_equals_splits(self):
        assert parse_options("|image=https://img.test/a.jpg?w=200") == {
            "image": "https://img.test/a.jpg?w=200"
        }

    def test_segments_without_equals_ignored(self):
        assert parse_options("|as=link|oops|text=Go") == {"as": "link", "text": "Go"}

    def test_empty(self):
        assert parse_options(None) == {}
        assert parse_options("") == {}


# === Test: Scanning ===


class TestScanTokens:
    def test_bare_token(self):
        tokens = list(scan_tokens("See [AffiliateLink_abc-1] now"))
        assert len(tokens) == 1
        token = tokens[0]
        assert token.kind is TokenKind.BARE
        assert token.raw_sku == "abc-1"
        assert token.sku == "ABC-1"
        assert token.text == "[AffiliateLink_abc-1]"
        assert token.options == {}

    def test_parametrized_token_with_whitespace(self):
        text = "x {{ aff : tent_2 |as=button|text=Go }} y"
        token = next(scan_tokens(text))
        assert token.kind is TokenKind.PARAMETRIZED
        assert token.sku == "TENT_2"
        assert token.option("as") == "button"
        assert token.option("text") == "Go"
        assert text[token.start:token.end] == token.text

    def test_parametrized_without_options(self):
        token = next(scan_tokens("{{aff:SKU1}}"))
        assert token.kind is TokenKind.PARAMETRIZED
        assert token.options == {}

    def test_document_order_across_grammars(self):
        text = "{{aff:B|as=link}} [AffiliateLink_A] {{aff:C}}"
        assert [t.raw_sku for t in scan_tokens(text)] == ["B", "A", "C"]

    def test_nested_bare_token_is_yielded(self):
        text = "{{aff:OUTER|text=[AffiliateLink_INNER]}}"
        tokens = list(scan_tokens(text))
        assert [(t.kind, t.raw_sku) for t in tokens] == [
            (TokenKind.PARAMETRIZED, "OUTER"),
            (TokenKind.BARE, "INNER"),
        ]

    def test_scan_single_grammar(self):
        text = "{{aff:B|text=[AffiliateLink_A]}} [AffiliateLink_C]"
        assert [t.raw_sku for t in scan_tokens(text, TokenKind.BARE)] == ["A", "C"]
        assert [t.raw_sku for t in scan_tokens(text, TokenKind.PARAMETRIZED)] == ["B"]

    @pytest.mark.parametrize("text", [
        "[AffiliateLink_]",
        "[AffiliateLink_a b]",
        "{{aff:}}",
        "{{affiliate:X}}",
        "[affiliatelink_X]",
    ])
    def test_non_tokens(self, text):
        assert list(scan_tokens(text)) == []

    def test_option_default(self):
        token = next(scan_tokens("{{aff:X|as=card}}"))
        assert token.option("title", "fallback") == "fallback"


class TestLineNumber:
    def test_one_based(self):
        text = "a\nb\n[AffiliateLink_X]"
        token = next(scan_tokens(text))
        assert line_number(text, token.start) == 3

    def test_first_line(self):
        assert line_number("abc", 0) == 1

"""Tests for the prebuild pipeline (sync → inject → verify)."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from src.common.errors import ConfigurationError, VerificationFailure
from src.common.documents import read_document
from src.content_engine.airtable_reader import Row
from src.content_engine.pipeline import run_pipeline

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


# === Fixtures ===


@pytest.fixture
def posts() -> list[Row]:
    return [
        Row("recPost", {
            "Title": "Running Shoes",
            "Status": "Ready",
            "Post Type": "Review",
            "Country": "DK",
            "Markdown": "Our pick: [AffiliateLink_ABC]",
            "SKUs": "shoe1",
        }),
    ]


# === Test: Full run ===


class TestRunPipeline:
    def test_sync_inject_verify(self, make_settings, fake_client, posts, affiliate_rows, content_dir):
        settings = make_settings(AFF_DEFAULT_MEDIUM="")
        client = fake_client({"tblPosts": posts, "tblAff": affiliate_rows})

        result = run_pipeline(settings, client=client, now=NOW)

        assert [call[0] for call in client.calls] == ["tblPosts", "tblAff"]
        assert len(result.sync.wrote) == 1
        assert result.injection.changed_count == 1
        assert result.verification.ok

        body = read_document(content_dir / "reviews" / "running-shoes.md").body
        assert "Our pick: https://x.test/p?ref=1&utm_source=store" in body
        assert 'href="https://shop.dk/shoe?utm_source=shopdk"' in body
        assert "{{aff:" not in body

    def test_unknown_sku_fails_verification(self, make_settings, fake_client, affiliate_rows):
        posts = [Row("rec1", {"Title": "T", "Status": "Ready", "SKUs": "NOPE"})]
        client = fake_client({"tblPosts": posts, "tblAff": affiliate_rows})

        with pytest.raises(VerificationFailure) as exc_info:
            run_pipeline(make_settings(), client=client, now=NOW)

        assert exc_info.value.residuals[0].token.startswith("{{aff:NOPE")

    def test_skip_sync(self, make_settings, fake_client, affiliate_rows):
        client = fake_client({"tblAff": affiliate_rows})
        result = run_pipeline(make_settings(), skip_sync=True, client=client, now=NOW)
        assert [call[0] for call in client.calls] == ["tblAff"]
        assert result.sync is None

    def test_posts_table_not_configured(self, make_settings, fake_client, affiliate_rows):
        client = fake_client({"tblAff": affiliate_rows})
        result = run_pipeline(
            make_settings(AIRTABLE_POSTS_TABLE_ID=""), client=client, now=NOW
        )
        assert result.sync is None
        assert result.injection is not None


# === Test: Credentials and CI ===


class TestCredentials:
    def test_ci_without_credentials_only_verifies(self, make_settings, fake_client, write_post):
        write_post("committed.md", "Already injected\n", title="C")
        client = fake_client({})

        result = run_pipeline(
            make_settings(CI="true", AIRTABLE_TOKEN=""), client=client, now=NOW
        )

        assert result.remote_skipped
        assert client.calls == []
        assert result.verification.ok

    def test_ci_without_credentials_still_gates(self, make_settings, fake_client, write_post):
        write_post("committed.md", "[AffiliateLink_X]\n", title="C")
        with pytest.raises(VerificationFailure):
            run_pipeline(make_settings(CI="true", AIRTABLE_TOKEN=""), client=fake_client({}))

    def test_missing_credentials_outside_ci(self, make_settings, fake_client):
        client = fake_client({})
        with pytest.raises(ConfigurationError):
            run_pipeline(make_settings(AIRTABLE_TOKEN=""), client=client)
        assert client.calls == []

    def test_owned_client_is_closed(self, make_settings, fake_client, affiliate_rows):
        client = fake_client({"tblAff": affiliate_rows})
        with patch("src.content_engine.pipeline.AirtableClient") as mock_cls:
            mock_cls.from_settings.return_value = client
            run_pipeline(make_settings(), skip_sync=True, now=NOW)
        assert client.closed

"""Shared test fixtures for the content engine."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings
from src.common.documents import Document, write_document
from src.content_engine.airtable_reader import CellFormat, Row


BASE_ENV = {
    "AIRTABLE_TOKEN": "pat_test",
    "AIRTABLE_BASE_ID": "appTEST",
    "AIRTABLE_POSTS_TABLE_ID": "tblPosts",
    "AIRTABLE_AFF_TABLE_ID": "tblAff",
    "AFF_TIMEZONE": "UTC",
}


class FakeAirtableClient:
    """Stands in for AirtableClient: serves rows per table id, records calls."""

    def __init__(self, tables: dict[str, list[Row]]):
        self.tables = tables
        self.calls: list[tuple[str, str | None, CellFormat]] = []
        self.closed = False

    def fetch_rows(self, table_id, view_id=None, cell_format=CellFormat.STRING):
        self.calls.append((table_id, view_id, cell_format))
        return list(self.tables.get(table_id, []))

    def close(self):
        self.closed = True


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def content_dir(tmp_path) -> Path:
    """Empty content root inside the test's temp directory."""
    path = tmp_path / "blog"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(tmp_path, content_dir):
    """Factory: Settings from BASE_ENV plus overrides, paths under tmp_path."""

    def _make(**env: str) -> Settings:
        values = dict(BASE_ENV)
        values.update(
            CONTENT_DIR=str(content_dir),
            AFF_MANIFEST_OUT=str(tmp_path / "tmp" / "injection.json"),
            SYNC_MANIFEST_OUT=str(tmp_path / "tmp" / "sync.json"),
        )
        values.update(env)
        return Settings.from_env(values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def affiliate_rows() -> list[Row]:
    """Affiliate Links rows: a two-country SKU, a base URL with a query, a full URL."""
    return [
        Row("recShoeAny", {
            "Product SKU": "SHOE1",
            "URL Base": "https://shop.test/shoe",
            "UTM Source": "shopany",
        }),
        Row("recShoeDK", {
            "Product SKU": "SHOE1",
            "Country": "DK",
            "URL Base": "https://shop.dk/shoe",
            "UTM Source": "shopdk",
        }),
        Row("recAbc", {
            "Product SKU": "abc",
            "URL Base": "https://x.test/p?ref=1",
            "UTM Source": "store",
        }),
        Row("recTent", {
            "Product SKU": "TENT 2",
            "Full Affiliate URL": "https://partner.test/t?post={{postSlug}}&d={{date}}",
        }),
        Row("recDisabled", {"Product SKU": "OFF1"}),
    ]


@pytest.fixture
def product_rows() -> list[Row]:
    return [
        Row("recP1", {
            "SKU": "SHOE1",
            "Name": "Trail Shoe",
            "Image": [{"url": "https://img.test/shoe.jpg", "filename": "shoe.jpg"}],
        }),
    ]


@pytest.fixture
def fake_client():
    """Factory for a FakeAirtableClient over {table_id: rows}."""
    return FakeAirtableClient


@pytest.fixture
def write_post(content_dir):
    """Write a Markdown post under the content root and return its path."""

    def _write(name: str, body: str, **front_matter) -> Path:
        path = content_dir / name
        write_document(path, Document(front_matter=front_matter, body=body))
        return path

    return _write

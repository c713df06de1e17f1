"""Airtable REST client — paginated table reads.

Usage:
    client = AirtableClient.from_settings(settings)
    rows = client.fetch_rows("tblPosts", view_id="viwReady")
"""

from __future__ import annotations

from typing import Any

import requests

from src.common.config import DEFAULT_API_URL, Settings
from src.common.errors import RemoteFetchError
from src.common.logging import setup_logging

from .models import CellFormat, Row

logger = setup_logging(module_name="airtable_reader")


class AirtableClient:
    """Reads every record of a table, following the ``offset`` cursor.

    Pages are fetched strictly one after another. There are no retries: any
    non-success response raises RemoteFetchError and aborts the stage.
    """

    def __init__(
        self,
        token: str,
        base_id: str,
        timezone: str = "Europe/Copenhagen",
        locale: str = "da-DK",
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_id = base_id
        self.timezone = timezone
        self.locale = locale
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token}"})

    @classmethod
    def from_settings(cls, settings: Settings) -> AirtableClient:
        airtable = settings.airtable
        return cls(
            token=airtable.token,
            base_id=airtable.base_id,
            timezone=airtable.timezone,
            locale=airtable.locale,
            api_url=airtable.api_url,
            timeout=airtable.request_timeout,
        )

    def table_url(self, table_id: str) -> str:
        return f"{self.api_url}/{self.base_id}/{table_id}"

    def fetch_rows(
        self,
        table_id: str,
        view_id: str | None = None,
        cell_format: CellFormat = CellFormat.STRING,
    ) -> list[Row]:
        """Fetch all rows of a table (optionally restricted to a view).

        Args:
            table_id: Airtable table id (or name)
            view_id: Optional view id; the view's filters and sort apply
            cell_format: STRING for display text, RAW to keep attachments

        Returns:
            Rows in the order Airtable returned them

        Raises:
            RemoteFetchError: On any non-2xx response or transport failure
        """
        url = self.table_url(table_id)
        base_params: dict[str, Any] = {}
        if cell_format is CellFormat.STRING:
            base_params.update(
                cellFormat="string", timeZone=self.timezone, userLocale=self.locale
            )
        if view_id:
            base_params["view"] = view_id

        rows: list[Row] = []
        offset: str | None = None
        page = 0
        while True:
            params = dict(base_params)
            if offset:
                params["offset"] = offset
            payload = self._get_page(url, params)
            page += 1
            records = payload.get("records") or []
            rows.extend(Row.from_record(r) for r in records)
            logger.debug("Fetched page %d of %s (%d records)", page, table_id, len(records))
            offset = payload.get("offset")
            if not offset:
                break

        logger.info("Fetched %d rows from %s", len(rows), table_id)
        return rows

    def _get_page(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteFetchError(url, None, str(exc)) from exc
        if not resp.ok:
            raise RemoteFetchError(url, resp.status_code, resp.text)
        return resp.json()

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> AirtableClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

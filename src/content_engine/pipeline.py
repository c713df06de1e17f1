"""Prebuild pipeline: content sync → affiliate injection → verification.

Stages run strictly in order and each finishes (manifest written) before the
next starts. In CI without Airtable credentials the remote stages are skipped
and only the verifier runs against the committed content.

Usage:
    result = run_pipeline(settings)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.common.config import Settings
from src.common.logging import setup_logging
from src.content_engine.affiliate_injector import InjectionManifest, run_injection
from src.content_engine.airtable_reader import AirtableClient
from src.content_engine.content_sync import SyncManifest, run_sync
from src.content_engine.verifier import VerificationReport, run_verification

logger = setup_logging(module_name="pipeline")


@dataclass
class PipelineResult:
    """What each stage produced; ``None`` for stages that did not run."""
    sync: Optional[SyncManifest] = None
    injection: Optional[InjectionManifest] = None
    verification: Optional[VerificationReport] = None
    remote_skipped: bool = False


def run_pipeline(
    settings: Settings,
    skip_sync: bool = False,
    client: Optional[AirtableClient] = None,
    now: Optional[datetime] = None,
) -> PipelineResult:
    """Run the prebuild stages in order.

    Raises:
        ConfigurationError: Required Airtable settings missing (outside CI)
        RemoteFetchError: Airtable request failed
        VerificationFailure: Tokens remain after injection
    """
    result = PipelineResult()

    if settings.runtime.ci and not settings.has_airtable_credentials:
        logger.info("Skipping content sync and injection (no Airtable env present in CI).")
        result.remote_skipped = True
    else:
        settings.require_injection()
        owned = client is None
        client = client or AirtableClient.from_settings(settings)
        try:
            if skip_sync:
                logger.info("Content sync skipped (--skip-sync).")
            elif not settings.tables.posts_table_id:
                logger.info("AIRTABLE_POSTS_TABLE_ID not set, skipping content sync.")
            else:
                result.sync = run_sync(settings, client=client, now=now)
            result.injection = run_injection(settings, client=client, now=now)
        finally:
            if owned:
                client.close()

    result.verification = run_verification(settings)
    return result

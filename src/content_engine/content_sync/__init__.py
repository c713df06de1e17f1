# Content Sync — Airtable Posts to Markdown files
"""
Content Sync module: filters Posts rows (status allow-list or publish
flag/date), writes one Markdown document per included row with front matter
and optional auto-inserted affiliate card tokens, and records a manifest.
"""

from .materializer import (
    ContentMaterializer,
    directory_for_type,
    format_timestamp,
    parse_publish_date,
    run_sync,
)
from .models import Inclusion, MaterializedPost, SkipReason, SyncManifest

__all__ = [
    "ContentMaterializer",
    "directory_for_type",
    "format_timestamp",
    "parse_publish_date",
    "run_sync",
    "Inclusion",
    "MaterializedPost",
    "SkipReason",
    "SyncManifest",
]

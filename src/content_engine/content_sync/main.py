"""CLI entry point for the Airtable content sync.

Usage:
    python -m src.content_engine.content_sync.main
    python -m src.content_engine.content_sync.main --content-dir src/data/blog --manifest tmp/sync.json
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.common.config import load_settings
from src.common.errors import PipelineError
from src.common.logging import set_debug, setup_logging

from .materializer import run_sync

logger = setup_logging(module_name="content_sync.main")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Write Airtable posts as Markdown files")
    parser.add_argument(
        "--content-dir",
        type=Path,
        help="Content root to write into (default: CONTENT_DIR or src/data/blog)",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        help="Output path for the content sync manifest JSON",
    )
    parser.add_argument("--env-file", type=Path, help="Path to .env file")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file).with_overrides(
            content_dir=args.content_dir,
            sync_manifest=args.manifest,
            debug=args.debug,
        )
        set_debug(settings.runtime.debug)
        manifest = run_sync(settings)
    except PipelineError as exc:
        logger.error("Content sync failed: %s", exc)
        return exc.exit_code

    print(
        f"\nWrote {len(manifest.wrote)} file(s), skipped {len(manifest.skipped)}. "
        f"Manifest: {settings.paths.sync_manifest}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

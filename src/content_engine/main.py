"""CLI entry point for the full prebuild pipeline.

Usage:
    python -m src.content_engine.main
    python -m src.content_engine.main --skip-sync --debug
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.common.config import load_settings
from src.common.errors import PipelineError
from src.common.logging import set_debug, setup_logging

from .pipeline import run_pipeline

logger = setup_logging(module_name="main")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Sync posts from Airtable, inject affiliate links and verify"
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        help="Content root (default: CONTENT_DIR or src/data/blog)",
    )
    parser.add_argument(
        "--skip-sync",
        action="store_true",
        help="Only inject and verify existing content",
    )
    parser.add_argument("--sync-manifest", type=Path, help="Content sync manifest path")
    parser.add_argument("--injection-manifest", type=Path, help="Injection manifest path")
    parser.add_argument(
        "--check-empty-links",
        action="store_true",
        default=None,
        help="Also fail verification on links with an empty target",
    )
    parser.add_argument("--env-file", type=Path, help="Path to .env file")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file).with_overrides(
            content_dir=args.content_dir,
            injection_manifest=args.injection_manifest,
            sync_manifest=args.sync_manifest,
            debug=args.debug,
            verify_empty_links=args.check_empty_links,
        )
        set_debug(settings.runtime.debug)
        run_pipeline(settings, skip_sync=args.skip_sync)
    except PipelineError as exc:
        logger.error("Prebuild failed: %s", exc)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for affiliate token injection.

Usage:
    python -m src.content_engine.affiliate_injector.main
    python -m src.content_engine.affiliate_injector.main --content-dir src/data/blog --debug
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.common.config import load_settings
from src.common.errors import PipelineError
from src.common.logging import set_debug, setup_logging

from .injector import run_injection

logger = setup_logging(module_name="affiliate_injector.main")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replace affiliate tokens in Markdown posts with tracked links"
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        help="Content root to rewrite (default: CONTENT_DIR or src/data/blog)",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        help="Output path for the injection manifest JSON",
    )
    parser.add_argument("--env-file", type=Path, help="Path to .env file")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file).with_overrides(
            content_dir=args.content_dir,
            injection_manifest=args.manifest,
            debug=args.debug,
        )
        set_debug(settings.runtime.debug)
        manifest = run_injection(settings)
    except PipelineError as exc:
        logger.error("Affiliate injection failed: %s", exc)
        return exc.exit_code

    print(
        f"\nUpdated {manifest.changed_count}/{len(manifest.files)} files "
        f"({len(manifest.missing)} missing). Manifest: {settings.paths.injection_manifest}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

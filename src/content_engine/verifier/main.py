"""CLI entry point for the affiliate token verifier.

Usage:
    python -m src.content_engine.verifier.main
    python -m src.content_engine.verifier.main --content-dir src/data/blog --check-empty-links
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.common.config import load_settings
from src.common.errors import PipelineError
from src.common.logging import set_debug, setup_logging

from .verifier import run_verification

logger = setup_logging(module_name="verifier.main")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fail when unresolved affiliate tokens remain in content"
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        help="Content root to scan (default: CONTENT_DIR or src/data/blog)",
    )
    parser.add_argument(
        "--check-empty-links",
        action="store_true",
        default=None,
        help="Also fail on links with an empty target",
    )
    parser.add_argument("--env-file", type=Path, help="Path to .env file")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file).with_overrides(
            content_dir=args.content_dir,
            debug=args.debug,
            verify_empty_links=args.check_empty_links,
        )
        set_debug(settings.runtime.debug)
        run_verification(settings)
    except PipelineError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())

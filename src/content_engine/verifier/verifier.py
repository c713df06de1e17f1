"""Verifier — fail the build when affiliate tokens survive injection.

Scans every Markdown file under the content root (front matter included)
with the same token grammars the injector uses. Read-only.

Optionally also reports anchors with an empty ``href`` and Markdown links
with an empty target, which is what a token resolving to an empty URL
leaves behind.
"""

from __future__ import annotations

import re
from pathlib import Path

from bs4 import BeautifulSoup

from src.common.config import Settings
from src.common.errors import Residual, VerificationFailure
from src.common.documents import iter_markdown_files
from src.common.logging import setup_logging
from src.content_engine.affiliate_injector.tokens import line_number, scan_tokens

from .models import EMPTY_LINK, UNRESOLVED_TOKEN, VerificationReport

logger = setup_logging(module_name="verifier")

_EMPTY_MARKDOWN_LINK_RE = re.compile(r"\[[^\]\n]*\]\(\s*\)")


def find_residual_tokens(text: str, file: str) -> list[Residual]:
    """Every token of either grammar still present in ``text``."""
    return [
        Residual(file=file, line=line_number(text, token.start), token=token.text,
                 reason=UNRESOLVED_TOKEN)
        for token in scan_tokens(text)
    ]


def find_empty_links(text: str, file: str) -> list[Residual]:
    """Anchors with a blank href and Markdown links with a blank target."""
    found: list[Residual] = []
    soup = BeautifulSoup(text, "html.parser")
    for anchor in soup.find_all("a"):
        href = anchor.get("href")
        if href is not None and not href.strip():
            found.append(
                Residual(file=file, line=anchor.sourceline or 1, token=str(anchor)[:120],
                         reason=EMPTY_LINK)
            )
    for match in _EMPTY_MARKDOWN_LINK_RE.finditer(text):
        found.append(
            Residual(file=file, line=line_number(text, match.start()), token=match.group(0),
                     reason=EMPTY_LINK)
        )
    return sorted(found, key=lambda r: r.line)


def verify_content(content_dir: Path, check_empty_links: bool = False) -> VerificationReport:
    """Scan the content tree and collect residuals (never raises on findings)."""
    report = VerificationReport()
    for path in iter_markdown_files(content_dir):
        text = path.read_text(encoding="utf-8")
        report.files_scanned += 1
        report.residuals.extend(find_residual_tokens(text, str(path)))
        if check_empty_links:
            report.residuals.extend(find_empty_links(text, str(path)))
    return report


def assert_verified(report: VerificationReport) -> None:
    """Raise VerificationFailure if the report has any residuals."""
    if not report.ok:
        raise VerificationFailure(report.residuals)


def run_verification(settings: Settings) -> VerificationReport:
    """Verify the configured content root.

    Raises:
        VerificationFailure: Residual tokens (or empty links, when enabled) found
    """
    content_dir = settings.paths.content_dir
    report = verify_content(content_dir, settings.runtime.verify_empty_links)
    if not report.ok:
        logger.error("Unresolved affiliate tokens found:\n%s", report.format())
        logger.error("Fix the SKUs in Airtable or update the posts, then re-run injection.")
        assert_verified(report)
    logger.info("No unresolved affiliate tokens found (%d files scanned).", report.files_scanned)
    return report

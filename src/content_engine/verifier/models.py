"""Data models for the verifier module."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.common.errors import Residual

UNRESOLVED_TOKEN = "unresolved token"
EMPTY_LINK = "empty link target"


@dataclass
class VerificationReport:
    """Result of scanning a content tree. ``ok`` when nothing was found."""
    files_scanned: int = 0
    residuals: list[Residual] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.residuals

    def by_file(self) -> dict[str, list[Residual]]:
        grouped: dict[str, list[Residual]] = {}
        for residual in self.residuals:
            grouped.setdefault(residual.file, []).append(residual)
        return grouped

    def format(self) -> str:
        """Operator-facing listing: one block per file, one line per residual."""
        lines = []
        for file, residuals in self.by_file().items():
            lines.append(f"  {file}")
            for r in residuals:
                lines.append(f"    line {r.line}: {r.token} ({r.reason})")
            lines.append("")
        return "\n".join(lines)

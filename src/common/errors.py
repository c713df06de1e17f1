"""Fatal error types shared by every pipeline stage.

Recoverable per-token conditions (unknown SKU, empty URL) are manifest
entries, not exceptions. Everything here aborts the run with exit code 1.
"""

from __future__ import annotations

from dataclasses import dataclass


class PipelineError(Exception):
    """Base class for errors that terminate a pipeline run."""

    exit_code = 1


class ConfigurationError(PipelineError):
    """Required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        invalid: list[str] | None = None,
    ):
        super().__init__(message)
        self.missing = list(missing or [])
        self.invalid = list(invalid or [])

    @classmethod
    def for_missing(cls, names: list[str]) -> ConfigurationError:
        return cls(f"Missing {', '.join(names)} in environment", missing=names)

    @classmethod
    def for_invalid(cls, names: list[str]) -> ConfigurationError:
        return cls(f"Invalid value for {', '.join(names)} in environment", invalid=names)


class ContentError(PipelineError):
    """A content file could not be parsed."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Cannot parse {path}: {detail}")


class RemoteFetchError(PipelineError):
    """Airtable answered with a non-success status or could not be reached."""

    def __init__(self, url: str, status: int | None, body: str):
        self.url = url
        self.status = status
        self.body = body
        label = f"HTTP {status}" if status is not None else "request failed"
        super().__init__(f"Airtable {label} for {url}: {body}")


@dataclass(frozen=True)
class Residual:
    """A token (or empty link) left in a content file after injection."""

    file: str
    line: int
    token: str
    reason: str = "unresolved token"


class VerificationFailure(PipelineError):
    """Residual tokens (or empty links) survived injection."""

    def __init__(self, residuals: list[Residual]):
        self.residuals = list(residuals)
        files = len({r.file for r in self.residuals})
        super().__init__(
            f"Affiliate verification failed: {len(self.residuals)} residual(s) in {files} file(s)"
        )

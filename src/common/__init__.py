# Common utilities and shared modules
"""
Shared components used by every pipeline stage:
- Configuration (explicit Settings object)
- Error types
- Logging configuration
- Markdown document (front matter) handling
"""

from .config import Settings
from .errors import (
    ConfigurationError,
    ContentError,
    PipelineError,
    RemoteFetchError,
    VerificationFailure,
)
from .logging import setup_logging

__all__ = [
    "Settings",
    "ConfigurationError",
    "ContentError",
    "PipelineError",
    "RemoteFetchError",
    "VerificationFailure",
    "setup_logging",
]

# Verifier — residual affiliate token gate
"""
Verifier module: scans the content tree after injection and fails the build
when affiliate tokens (or, optionally, empty link targets) remain.
"""

from .models import VerificationReport
from .verifier import (
    assert_verified,
    find_empty_links,
    find_residual_tokens,
    run_verification,
    verify_content,
)

__all__ = [
    "VerificationReport",
    "assert_verified",
    "find_empty_links",
    "find_residual_tokens",
    "run_verification",
    "verify_content",
]

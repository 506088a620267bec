"""
Build-configuration failure classification (pure).

CMake does not report "BLAS/LAPACK missing" through its exit status
alone; the find modules print it and configuration sometimes carries
on. The signatures below are matched against the captured log. No I/O.
"""

from __future__ import annotations

import enum

# Bump when the table changes so logs can say which table classified them.
SIGNATURE_TABLE_VERSION = 1

LIBRARY_FAILURE_SIGNATURES: tuple[str, ...] = (
    "A library with BLAS API not found",
    "No LAPACK package found",
    "LAPACK requires BLAS",
)


class Outcome(enum.Enum):
    OK = "ok"
    NEEDS_LIBRARY_RETRY = "needs_library_retry"
    FATAL = "fatal"


def match_signature(log_text: str) -> str | None:
    """The first library-failure signature found in ``log_text``."""
    for signature in LIBRARY_FAILURE_SIGNATURES:
        if signature in log_text:
            return signature
    return None


def classify(log_text: str, exit_status: int) -> Outcome:
    """Classify one configuration attempt.

    A signature match wins over the exit status: a run that printed
    "No LAPACK package found" and still exited 0 needs the retry.
    """
    if match_signature(log_text or "") is not None:
        return Outcome.NEEDS_LIBRARY_RETRY
    if exit_status != 0:
        return Outcome.FATAL
    return Outcome.OK

"""
ValidatorSettings schema.

The human-authored, reviewable settings for the invoice validator. YAML
files are parsed into these types by the loader; bridges translate them into
keyword arguments the kernel understands.
"""

from __future__ import annotations

from dataclasses import dataclass

TIME_CHECK_MODES: frozenset[str] = frozenset({"reachable", "contained"})
LOG_LEVELS: frozenset[str] = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
)


@dataclass(frozen=True)
class ValidatorSettings:
    """Settings for one deployment of the invoice validator."""

    name: str
    version: int
    time_check: str = "reachable"  # "reachable" or "contained"
    abort_trace: str = "InvoiceFactor: validation failed"
    log_level: str = "INFO"
    description: str = ""
    checksum: str = ""

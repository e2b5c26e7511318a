"""
Config -> Kernel Bridges.

Functions that convert ValidatorSettings into kernel-compatible inputs.
These live in invoice_config (the producer) because the kernel must NEVER
import invoice_config.

Usage:
    from invoice_config import get_active_settings
    from invoice_config.bridges import validator_kwargs

    settings = get_active_settings()
    run_validator(datum, redeemer, context, **validator_kwargs(settings))
"""

from __future__ import annotations

import logging
from typing import Any

from invoice_config.schema import ValidatorSettings
from invoice_kernel.domain.readers import TimeCheck
from invoice_kernel.logging_config import configure_logging


def time_check_for(settings: ValidatorSettings) -> TimeCheck:
    return TimeCheck(settings.time_check)


def validator_kwargs(settings: ValidatorSettings) -> dict[str, Any]:
    """Keyword arguments for ``invoice_kernel.entry.run_validator``."""
    return {
        "time_check": time_check_for(settings),
        "abort_trace": settings.abort_trace,
    }


def configure_logging_from(settings: ValidatorSettings) -> None:
    """Configure kernel logging at the settings' level (idempotent)."""
    configure_logging(level=logging.getLevelName(settings.log_level))

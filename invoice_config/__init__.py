"""
invoice_config -- single public entrypoint for validator settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``. YAML loading is internal tooling.

Architecture position:
    Configuration. This package sits above ``invoice_kernel``. The kernel
    MUST NEVER import from ``invoice_config``; bridges in this package
    translate settings into kernel keyword arguments.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- the settings file is not valid YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.

Audit relevance:
    Every successful ``get_active_settings()`` call emits an
    ``INVOICE_CONFIG_TRACE`` log entry carrying the settings name, version
    and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from invoice_config.loader import load_settings
from invoice_config.schema import ValidatorSettings

_logger = logging.getLogger("invoice_kernel.config")

_DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings" / "default.yaml"


def get_active_settings(config_path: Path | None = None) -> ValidatorSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override path to a settings YAML file. Defaults to
            invoice_config/settings/default.yaml.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a setting is invalid.
    """
    path = config_path or _DEFAULT_SETTINGS_PATH
    settings = load_settings(path)

    _logger.info(
        "INVOICE_CONFIG_TRACE",
        extra={
            "trace_type": "INVOICE_CONFIG_TRACE",
            "settings_name": settings.name,
            "settings_version": settings.version,
            "checksum": settings.checksum,
            "time_check": settings.time_check,
        },
    )
    return settings


__all__ = ["ValidatorSettings", "get_active_settings"]

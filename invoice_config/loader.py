"""
Settings Loader (``invoice_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a typed, validated
``ValidatorSettings``. The single public entry point for runtime settings
is ``invoice_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Values outside the allowed sets  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from invoice_config.schema import LOG_LEVELS, TIME_CHECK_MODES, ValidatorSettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_settings(data: dict[str, Any]) -> ValidatorSettings:
    """
    Parse ``ValidatorSettings`` from a settings dict.

    Expected shape::

        name: invoice-factor
        version: 1
        validator:
          time_check: reachable
          abort_trace: "InvoiceFactor: validation failed"
        logging:
          level: INFO

    Raises:
        KeyError: if ``name`` or ``version`` is missing.
        ValueError: if a value is outside its allowed set.
    """
    validator = data.get("validator") or {}
    logging_section = data.get("logging") or {}

    version = data["version"]
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise ValueError(f"version must be a positive integer, got {version!r}")

    time_check = str(validator.get("time_check", "reachable")).lower()
    if time_check not in TIME_CHECK_MODES:
        raise ValueError(
            f"validator.time_check must be one of {sorted(TIME_CHECK_MODES)}, "
            f"got {time_check!r}"
        )

    log_level = str(logging_section.get("level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {sorted(LOG_LEVELS)}, got {log_level!r}"
        )

    abort_trace = validator.get("abort_trace", "InvoiceFactor: validation failed")
    if not isinstance(abort_trace, str) or not abort_trace:
        raise ValueError("validator.abort_trace must be a non-empty string")

    return ValidatorSettings(
        name=data["name"],
        version=version,
        time_check=time_check,
        abort_trace=abort_trace,
        log_level=log_level,
        description=data.get("description", ""),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> ValidatorSettings:
    """Load and parse a settings file."""
    return parse_settings(load_yaml_file(path))

"""
backoffice_config -- single public entrypoint for organisation settings.

Responsibility:
    Provides ``get_org_settings()``, the way services obtain the
    organisation's settings at runtime.  Engines never read settings; services
    pass the individual values into engine calls.

Architecture position:
    Configuration -- sits above ``backoffice_kernel`` and below
    ``backoffice_modules``.  The kernel and the engines MUST NEVER import
    from ``backoffice_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_org_settings()`` call emits a
    ``BACKOFFICE_CONFIG_TRACE`` log entry with the source path and a checksum
    of the loaded values.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path

from backoffice_config.loader import (
    compute_checksum,
    load_org_settings,
    org_settings_from_api,
    org_settings_to_api,
)
from backoffice_config.schema import OrgSettings

_logger = logging.getLogger("backoffice.config")

# Packaged defaults
_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "sets" / "default.yaml"


def get_org_settings(config_path: Path | None = None) -> OrgSettings:
    """Load organisation settings from ``config_path`` or the packaged defaults.

    Guarantees:
        - The returned ``OrgSettings`` has passed field validation.
        - A ``BACKOFFICE_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - No caching; callers hold the returned settings for the duration of
          a request.
    """
    path = config_path or _DEFAULT_SETTINGS_FILE
    settings = load_org_settings(path)

    _logger.info(
        "BACKOFFICE_CONFIG_TRACE",
        extra={
            "trace_type": "BACKOFFICE_CONFIG_TRACE",
            "source": str(path),
            "checksum": compute_checksum(asdict(settings)),
            "currency_code": settings.currency_code,
            "billing_increment": settings.billing_increment,
        },
    )
    return settings


__all__ = [
    "OrgSettings",
    "get_org_settings",
    "load_org_settings",
    "org_settings_from_api",
    "org_settings_to_api",
]

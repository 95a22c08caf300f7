"""
Settings Loader (``backoffice_config.loader``).

Responsibility
--------------
Reads organisation settings from the two sources the back office has: a
sectioned YAML document (packaged defaults or an operator override) and the
settings API's camelCase payload.  Both produce an ``OrgSettings``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Callers normally go through
``backoffice_config.get_org_settings()``; ``org_settings_from_api`` is used
where settings arrive over the wire.

Invariants enforced
-------------------
* YAML sections are flattened; section names carry no meaning.
* Unknown keys are rejected in YAML (typos must not silently fall back to
  defaults) and ignored in API payloads (the API carries profile fields the
  core does not use).
* Missing or null API values fall back to the ``OrgSettings`` defaults,
  except ``defaultHourlyRate`` where null means "no default rate".

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown YAML key or invalid value  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from backoffice_config.schema import OrgSettings

_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in fields(OrgSettings))

# Settings API key -> OrgSettings field
API_FIELD_MAP: dict[str, str] = {
    "timezone": "timezone",
    "currency": "currency_code",
    "currencySymbol": "currency_symbol",
    "dateFormat": "date_format",
    "numberFormat": "number_format",
    "notifyTimesheetApproval": "notify_timesheet_approval",
    "notifyInvoiceOverdue": "notify_invoice_overdue",
    "notifyFlaggedTimesheets": "notify_flagged_timesheets",
    "notifyJobDeadline": "notify_job_deadline",
    "notifyNewUser": "notify_new_user",
    "overdueInvoiceDays": "overdue_invoice_days",
    "defaultHourlyRate": "default_hourly_rate",
    "billingIncrement": "billing_increment",
    "defaultTaxRate": "default_tax_rate",
    "invoicePrefix": "invoice_prefix",
    "invoicePaymentTermsDays": "invoice_payment_terms_days",
    "dailyHoursThreshold": "daily_hours_threshold",
    "flagUnderHours": "flag_under_hours",
    "flagOverHours": "flag_over_hours",
    "flagJobOvertime": "flag_job_overtime",
    "hourlyCostRatio": "hourly_cost_ratio",
    "requireClientForJob": "require_client_for_job",
}

# Fields where an explicit null is a meaningful value.
_NULLABLE_FIELDS: frozenset[str] = frozenset({"default_hourly_rate"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def flatten_sections(data: dict[str, Any]) -> dict[str, Any]:
    """Merge ``{section: {key: value}}`` into ``{key: value}``.

    Top-level scalar keys are accepted as-is so a flat file also loads.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value
    return flat


def settings_from_dict(data: dict[str, Any]) -> OrgSettings:
    """
    Build ``OrgSettings`` from snake_case keys.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(unknown)}")
    kwargs = {
        key: value
        for key, value in data.items()
        if value is not None or key in _NULLABLE_FIELDS
    }
    return OrgSettings(**kwargs)


def load_org_settings(path: Path) -> OrgSettings:
    """Load ``OrgSettings`` from a sectioned YAML file."""
    return settings_from_dict(flatten_sections(load_yaml_file(path)))


def org_settings_from_api(payload: dict[str, Any]) -> OrgSettings:
    """
    Map the settings API response onto ``OrgSettings``.

    The payload has the shape ``{"org": {"name", "slug"}, "settings": {...}}``
    with camelCase setting keys.  Empty strings for text settings fall back to
    the defaults, matching how the dashboard treats them.
    """
    org = payload.get("org") or {}
    raw = payload.get("settings") or {}

    kwargs: dict[str, Any] = {
        "org_name": org.get("name") or "",
        "org_slug": org.get("slug") or "",
    }
    for api_key, field_name in API_FIELD_MAP.items():
        if api_key not in raw:
            continue
        value = raw[api_key]
        if value is None and field_name not in _NULLABLE_FIELDS:
            continue
        if value == "":
            continue
        kwargs[field_name] = value
    return OrgSettings(**kwargs)


def org_settings_to_api(settings: OrgSettings) -> dict[str, Any]:
    """Serialize ``OrgSettings`` back to the settings API's camelCase keys."""
    out: dict[str, Any] = {}
    for api_key, field_name in API_FIELD_MAP.items():
        value = getattr(settings, field_name)
        out[api_key] = str(value) if isinstance(value, Decimal) else value
    return out


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

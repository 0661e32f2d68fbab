"""
Policy Loader (``minijob_config.loader``).

Responsibility
--------------
Loads the YAML policy file and parses it into the typed
``minijob_config.schema`` dataclasses.  Runtime callers go through
``minijob_config.get_active_policy()`` instead of calling this directly.

Architecture position
---------------------
**Config layer**.  Depends on the kernel's domain DTOs (``MinijobLimit``);
never on engines or services.

Invariants enforced
-------------------
* Amounts and ratios are parsed into ``Decimal`` from their text form,
  never through binary floating point arithmetic.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for policy
  identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid date or number  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from minijob_config.schema import (
    BillingPeriodDefaultsDef,
    MinijobPolicy,
    TimeEntryRulesDef,
    WarningThresholdsDef,
)
from minijob_kernel.domain.dtos import MinijobLimit


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """
    Parse a date from YAML (string or date object).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    """
    Parse a decimal from YAML.  Unquoted YAML numbers arrive as int or
    float and are converted through their shortest text form.

    Raises:
        ValueError: if ``value`` is not numeric.
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse decimal from {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Cannot parse decimal from {value!r}") from e
    raise ValueError(f"Cannot parse decimal from {value!r}")


def parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def parse_limit(data: dict[str, Any]) -> MinijobLimit:
    """Parse one ``limits`` item."""
    until = data.get("effective_until")
    return MinijobLimit(
        amount=parse_decimal(data["amount"]),
        effective_from=parse_date(data["effective_from"]),
        effective_until=parse_date(until) if until else None,
        description=data.get("description"),
    )


def parse_policy(data: dict[str, Any], checksum: str = "") -> MinijobPolicy:
    """
    Parse a ``MinijobPolicy`` from a dict.

    Preconditions:
        - ``data`` contains at minimum ``name`` and ``limits``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if dates or numbers cannot be parsed.
    """
    thresholds = data.get("warning_thresholds") or {}
    entries = data.get("time_entries") or {}
    defaults = data.get("billing_period_defaults") or {}

    return MinijobPolicy(
        name=data["name"],
        version=parse_int(data.get("version", 1), "version"),
        currency=str(data.get("currency", "EUR")),
        warning_thresholds=WarningThresholdsDef(
            warning_ratio=parse_decimal(thresholds.get("warning_ratio", "0.8")),
            critical_ratio=parse_decimal(thresholds.get("critical_ratio", "1.0")),
        ),
        time_entries=TimeEntryRulesDef(
            minimum_work_minutes=parse_int(
                entries.get("minimum_work_minutes", 15), "minimum_work_minutes"
            ),
            maximum_break_minutes=parse_int(
                entries.get("maximum_break_minutes", 480), "maximum_break_minutes"
            ),
        ),
        billing_period_defaults=BillingPeriodDefaultsDef(
            start_day=parse_int(defaults.get("start_day", 1), "start_day"),
            end_day=parse_int(defaults.get("end_day", 31), "end_day"),
        ),
        limits=tuple(parse_limit(item) for item in data["limits"]),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

"""
minijob_config -- single public entrypoint for the minijob policy.

Responsibility:
    Provides the ONLY way to obtain the policy at runtime through
    ``get_active_policy()``: warning thresholds, entry rules, default
    billing days and the statutory limit history.  YAML loading is
    internal tooling and never exposed to callers.

Architecture position:
    Configuration -- YAML policy, load-time validation.  Sits above
    ``minijob_kernel`` and below ``minijob_services``.  The kernel and the
    engines MUST NEVER import from ``minijob_config``; ``bridges`` translates
    the policy into engine inputs.

Invariants enforced:
    - Single entrypoint: all runtime policy flows through ``get_active_policy()``.
    - Load-time validation: a policy with validation errors is never returned.
    - Deterministic identity: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the policy file does not exist.
    - ``ConfigError`` -- the file is structurally malformed.
    - ``PolicyValidationError`` (a ``ConfigError``) -- validation errors.

Audit relevance:
    Every successful ``get_active_policy()`` call emits a
    ``MINIJOB_CONFIG_TRACE`` log entry with the policy name, version,
    checksum and limit count.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from minijob_config.loader import compute_checksum, load_yaml_file, parse_policy
from minijob_config.schema import MinijobPolicy
from minijob_config.validator import PolicyValidationResult, validate_policy
from minijob_kernel.exceptions import ConfigError, PolicyValidationError, ValidationError
from minijob_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "defaults" / "policy.yaml"


def get_active_policy(path: Path | str | None = None) -> MinijobPolicy:
    """The ONLY public policy entrypoint.

    Guarantees:
        - The returned policy has passed ``validate_policy`` without errors.
        - Validation warnings are logged, not raised.
        - A ``MINIJOB_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - No caching across calls; callers hold the returned policy.

    Args:
        path: Override path to a policy YAML file.  Defaults to the
            packaged ``defaults/policy.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If the file is malformed.
        PolicyValidationError: If validation fails.
    """
    policy_path = Path(path) if path is not None else DEFAULT_POLICY_PATH

    try:
        data = load_yaml_file(policy_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed minijob policy {policy_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Minijob policy {policy_path} must be a mapping")

    checksum = compute_checksum(data)
    try:
        policy = parse_policy(data, checksum=checksum)
    except ConfigError:
        raise
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ConfigError(f"Malformed minijob policy {policy_path}: {e!r}") from e

    validation = validate_policy(policy)
    if not validation.is_valid:
        raise PolicyValidationError(validation.errors)
    for warning in validation.warnings:
        _logger.warning("policy_warning", extra={"detail": warning})

    _logger.info(
        "MINIJOB_CONFIG_TRACE",
        extra={
            "trace_type": "MINIJOB_CONFIG_TRACE",
            "policy_name": policy.name,
            "policy_version": policy.version,
            "checksum": checksum,
            "currency": policy.currency,
            "limit_count": len(policy.limits),
            "source": str(policy_path),
        },
    )
    return policy


__all__ = [
    "DEFAULT_POLICY_PATH",
    "MinijobPolicy",
    "PolicyValidationResult",
    "get_active_policy",
    "validate_policy",
]

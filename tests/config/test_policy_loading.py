"""
Tests for minijob policy loading, validation and the config-to-engine bridges.
"""

from datetime import date
from decimal import Decimal

import pytest

from minijob_config import DEFAULT_POLICY_PATH, get_active_policy, validate_policy
from minijob_config.bridges import (
    default_period_config,
    limit_schedule_from_policy,
    warning_classifier_from_policy,
)
from minijob_config.loader import compute_checksum, parse_decimal, parse_policy
from minijob_kernel.domain.dtos import BillingPeriodConfig, WarningLevel
from minijob_kernel.exceptions import ConfigError, PolicyValidationError

VALID_POLICY = """\
name: test-policy
version: 2
currency: EUR
warning_thresholds:
  warning_ratio: "0.75"
  critical_ratio: "1.0"
time_entries:
  minimum_work_minutes: 10
  maximum_break_minutes: 120
billing_period_defaults:
  start_day: 25
  end_day: 24
limits:
  - amount: "520.00"
    effective_from: 2022-10-01
"""


def _write(tmp_path, text):
    path = tmp_path / "policy.yaml"
    path.write_text(text)
    return path


class TestDefaultPolicy:
    def test_loads(self):
        policy = get_active_policy()
        assert policy.name == "minijob-de"
        assert policy.currency == "EUR"
        assert policy.warning_thresholds.warning_ratio == Decimal("0.8")
        assert policy.time_entries.minimum_work_minutes == 15
        assert policy.time_entries.maximum_break_minutes == 480

    def test_limit_history(self):
        schedule = limit_schedule_from_policy(get_active_policy())
        assert schedule.require(date(2023, 6, 1)).amount == Decimal("520.00")
        assert schedule.require(date(2024, 6, 1)).amount == Decimal("538.00")
        assert schedule.require(date(2025, 6, 1)).amount == Decimal("556.00")
        assert schedule.require(date(2030, 1, 1)).amount == Decimal("603.00")
        assert schedule.effective_on(date(2022, 9, 30)) is None

    def test_default_file_is_valid(self):
        result = validate_policy(get_active_policy())
        assert result.is_valid
        assert result.warnings == []

    def test_checksum_is_stable(self):
        assert get_active_policy().checksum == get_active_policy().checksum
        assert len(get_active_policy().checksum) == 64

    def test_config_trace_logged(self, captured_logs):
        get_active_policy(DEFAULT_POLICY_PATH)
        (trace,) = [r for r in captured_logs() if r["message"] == "MINIJOB_CONFIG_TRACE"]
        assert trace["policy_name"] == "minijob-de"
        assert trace["limit_count"] == 4


class TestCustomPolicy:
    def test_loads_from_path(self, tmp_path):
        policy = get_active_policy(_write(tmp_path, VALID_POLICY))
        assert policy.version == 2
        assert default_period_config(policy) == BillingPeriodConfig(25, 24)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_policy(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError):
            get_active_policy(_write(tmp_path, "name: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError):
            get_active_policy(_write(tmp_path, "- just\n- a list\n"))

    def test_missing_limits_key(self, tmp_path):
        with pytest.raises(ConfigError):
            get_active_policy(_write(tmp_path, "name: no-limits\n"))

    def test_bad_amount(self, tmp_path):
        text = VALID_POLICY.replace('"520.00"', '"lots"')
        with pytest.raises(ConfigError):
            get_active_policy(_write(tmp_path, text))

    def test_overlapping_limits_fail_validation(self, tmp_path):
        text = VALID_POLICY + '  - amount: "538.00"\n    effective_from: 2024-01-01\n'
        with pytest.raises(PolicyValidationError) as exc:
            get_active_policy(_write(tmp_path, text))
        assert isinstance(exc.value, ConfigError)
        assert any("overlaps" in error for error in exc.value.errors)

    def test_inverted_thresholds_fail_validation(self, tmp_path):
        text = VALID_POLICY.replace('"0.75"', '"1.5"')
        with pytest.raises(PolicyValidationError):
            get_active_policy(_write(tmp_path, text))

    def test_checksum_changes_with_content(self, tmp_path):
        first = get_active_policy(_write(tmp_path, VALID_POLICY))
        second = get_active_policy(_write(tmp_path, VALID_POLICY.replace("version: 2", "version: 3")))
        assert first.checksum != second.checksum


class TestValidationWarnings:
    def _policy(self, **overrides):
        data = {
            "name": "p",
            "limits": [{"amount": "520.00", "effective_from": "2022-10-01"}],
        }
        data.update(overrides)
        return parse_policy(data, compute_checksum(data))

    def test_gap_between_limits_is_warning(self):
        policy = self._policy(
            limits=[
                {"amount": "520.00", "effective_from": "2022-10-01", "effective_until": "2023-06-30"},
                {"amount": "538.00", "effective_from": "2024-01-01"},
            ]
        )
        result = validate_policy(policy)
        assert result.is_valid
        assert any("No limit in force" in w for w in result.warnings)

    def test_closed_last_limit_is_warning(self):
        policy = self._policy(
            limits=[{"amount": "520.00", "effective_from": "2022-10-01", "effective_until": "2023-12-31"}]
        )
        assert any("Last limit ends" in w for w in validate_policy(policy).warnings)

    def test_short_month_billing_day_is_warning(self):
        policy = self._policy(billing_period_defaults={"start_day": 30, "end_day": 29})
        warnings = validate_policy(policy).warnings
        assert len(warnings) == 2

    def test_out_of_range_billing_day_is_error(self):
        policy = self._policy(billing_period_defaults={"start_day": 0, "end_day": 31})
        assert not validate_policy(policy).is_valid

    def test_bad_currency_is_error(self):
        assert not validate_policy(self._policy(currency="EURO")).is_valid

    def test_no_limits_is_error(self):
        assert not validate_policy(self._policy(limits=[])).is_valid


class TestBridges:
    def test_classifier_uses_policy_thresholds(self, tmp_path):
        classifier = warning_classifier_from_policy(get_active_policy(_write(tmp_path, VALID_POLICY)))
        assert classifier.classify(Decimal("390.00"), Decimal("520.00")) == WarningLevel.WARNING
        assert classifier.classify(Decimal("389.99"), Decimal("520.00")) == WarningLevel.SAFE


def test_parse_decimal_avoids_float_noise():
    assert parse_decimal(0.8) == Decimal("0.8")
    assert parse_decimal(520) == Decimal("520")
    with pytest.raises(ValueError):
        parse_decimal(True)

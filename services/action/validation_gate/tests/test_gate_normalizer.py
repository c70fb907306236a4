"""Normalization and equality rules for submitted identity values."""

from __future__ import annotations

import pytest

from services.action.validation_gate.normalizer import (
    collapse_spaces,
    normalize,
    strip_periods,
    values_equal,
)


@pytest.mark.parametrize("value", ["  S. Sathish ", "EMP006", "", "a  b", "Ünïcode"])
def test_normalize_is_idempotent(value: str) -> None:
    assert normalize(normalize(value)) == normalize(value)


def test_variants_strip_case_periods_and_spaces() -> None:
    assert normalize("  S. Sathish ") == "s. sathish"
    assert strip_periods("S. Sathish") == "s sathish"
    assert collapse_spaces("S. Sathish") == "s.sathish"


@pytest.mark.parametrize(
    ("submitted", "canonical"),
    [
        ("S. Sathish", "S Sathish"),
        ("SSathish", "S Sathish"),
        ("s. sathish", "S Sathish"),
        ("  S SATHISH  ", "S Sathish"),
    ],
)
def test_values_equal_tolerates_formatting_drift(submitted: str, canonical: str) -> None:
    assert values_equal(submitted, canonical) is True


def test_values_equal_rejects_different_values() -> None:
    assert values_equal("John Doe", "S Sathish") is False
    # Periods and spaces are stripped independently, never together.
    assert values_equal("S.Sathish", "SSathish") is True
    assert values_equal("S. Sathish", "SSathish") is False

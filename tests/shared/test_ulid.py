"""Tests for shared ULID conversion and ordering semantics."""

from __future__ import annotations

import pytest

from packages.portal_shared.ids import (
    generate_ulid_bytes,
    generate_ulid_str,
    ulid_bytes_to_str,
    ulid_str_to_bytes,
)


def test_ulid_string_bytes_conversion_is_lossless() -> None:
    ulid_value = generate_ulid_str()

    assert len(ulid_value) == 26
    assert ulid_bytes_to_str(ulid_str_to_bytes(ulid_value)) == ulid_value


def test_ulid_lexicographic_order_matches_big_endian_binary() -> None:
    """Sorting canonical strings must match sorting binary big-endian ULIDs."""
    values = [generate_ulid_bytes(timestamp_ms=1_700_000_000_000) for _ in range(300)]

    assert sorted(values) == sorted(values, key=ulid_bytes_to_str)


def test_later_timestamps_sort_after_earlier_ones() -> None:
    early = generate_ulid_bytes(timestamp_ms=1_000)
    late = generate_ulid_bytes(timestamp_ms=2_000)

    assert early < late


@pytest.mark.parametrize(
    "value", ["", "0" * 25, "I" * 26, "8ZZZZZZZZZZZZZZZZZZZZZZZZZ"]
)
def test_ulid_str_to_bytes_rejects_malformed_values(value: str) -> None:
    with pytest.raises(ValueError):
        ulid_str_to_bytes(value)


def test_ulid_bytes_to_str_requires_sixteen_bytes() -> None:
    with pytest.raises(ValueError):
        ulid_bytes_to_str(b"\x00" * 15)

"""Comparison-key normalization for submitted identity fields.

Submitted and canonical values are compared as normalized keys so that
case, surrounding whitespace, initials punctuation, and spacing drift
between data sources do not cause false mismatches.
"""

from __future__ import annotations


def normalize(value: str) -> str:
    """Return the lower-cased, trimmed comparison key for ``value``."""
    return value.strip().lower()


def strip_periods(value: str) -> str:
    """Return the normalized key with every period removed."""
    return normalize(value).replace(".", "")


def collapse_spaces(value: str) -> str:
    """Return the normalized key with every space removed."""
    return normalize(value).replace(" ", "")


def values_equal(submitted: str, canonical: str) -> bool:
    """Return whether two values match under any normalization variant."""
    if normalize(submitted) == normalize(canonical):
        return True
    if strip_periods(submitted) == strip_periods(canonical):
        return True
    return collapse_spaces(submitted) == collapse_spaces(canonical)

"""Field-level comparison of submitted values against a canonical record."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict

from services.action.validation_gate.normalizer import values_equal
from services.state.subject_records.domain import CanonicalRecord


class ComparisonStatus(str, Enum):
    MATCHED = "matched"
    PARTIAL_MATCH = "partial_match"
    MISMATCH = "mismatch"


class FieldComparison(BaseModel):
    """Outcome of comparing one submitted field."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str
    submitted: str
    canonical: str | None
    matched: bool


class ComparisonReport(BaseModel):
    """Deterministic per-field report with an overall score and status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fields: tuple[FieldComparison, ...]
    score: float
    status: ComparisonStatus

    @property
    def all_matched(self) -> bool:
        return self.status == ComparisonStatus.MATCHED

    def mismatched_fields(self) -> list[str]:
        return [item.field for item in self.fields if not item.matched]


def compare_fields(
    submitted_fields: Mapping[str, str], record: CanonicalRecord | None
) -> ComparisonReport:
    """Compare each submitted field against ``record``.

    A missing record, or a field the record does not carry, is a mismatch.
    Fields are reported in sorted name order.
    """
    comparisons: list[FieldComparison] = []
    for field in sorted(submitted_fields):
        submitted = submitted_fields[field]
        canonical = None if record is None else record.value_for(field)
        comparisons.append(
            FieldComparison(
                field=field,
                submitted=submitted,
                canonical=canonical,
                matched=canonical is not None and values_equal(submitted, canonical),
            )
        )
    matched = sum(1 for item in comparisons if item.matched)
    score = round(matched / len(comparisons), 4) if comparisons else 0.0
    return ComparisonReport(
        fields=tuple(comparisons),
        score=score,
        status=_status_for(matched=matched, compared=len(comparisons)),
    )


def _status_for(*, matched: int, compared: int) -> ComparisonStatus:
    if compared > 0 and matched == compared:
        return ComparisonStatus.MATCHED
    if matched > 0:
        return ComparisonStatus.PARTIAL_MATCH
    return ComparisonStatus.MISMATCH

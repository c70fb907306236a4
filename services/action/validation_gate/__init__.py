"""Validation Gate Service native package exports."""

from services.action.validation_gate.comparator import (
    ComparisonReport,
    ComparisonStatus,
    FieldComparison,
    compare_fields,
)
from services.action.validation_gate.component import MANIFEST, SERVICE_COMPONENT_ID
from services.action.validation_gate.config import ValidationGateSettings
from services.action.validation_gate.domain import (
    Accepted,
    Blocked,
    HealthStatus,
    InvalidRequest,
    JustBlocked,
    Rejected,
    ValidationOutcome,
)
from services.action.validation_gate.implementation import (
    DefaultValidationGateService,
)
from services.action.validation_gate.normalizer import (
    collapse_spaces,
    normalize,
    strip_periods,
    values_equal,
)
from services.action.validation_gate.service import (
    ValidationGateService,
    build_validation_gate_service,
)

__all__ = [
    "MANIFEST",
    "SERVICE_COMPONENT_ID",
    "Accepted",
    "Blocked",
    "ComparisonReport",
    "ComparisonStatus",
    "DefaultValidationGateService",
    "FieldComparison",
    "HealthStatus",
    "InvalidRequest",
    "JustBlocked",
    "Rejected",
    "ValidationGateService",
    "ValidationGateSettings",
    "ValidationOutcome",
    "build_validation_gate_service",
    "collapse_spaces",
    "compare_fields",
    "normalize",
    "strip_periods",
    "values_equal",
]

"""Subject Records Service native package exports."""

from services.state.subject_records.component import MANIFEST, SERVICE_COMPONENT_ID
from services.state.subject_records.config import SubjectRecordsSettings
from services.state.subject_records.domain import CanonicalRecord, HealthStatus
from services.state.subject_records.implementation import (
    DefaultSubjectRecordsService,
)
from services.state.subject_records.service import (
    SubjectRecordsService,
    build_subject_records_service,
)

__all__ = [
    "MANIFEST",
    "SERVICE_COMPONENT_ID",
    "CanonicalRecord",
    "DefaultSubjectRecordsService",
    "HealthStatus",
    "SubjectRecordsService",
    "SubjectRecordsSettings",
    "build_subject_records_service",
]

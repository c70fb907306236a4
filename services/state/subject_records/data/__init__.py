"""Data-layer exports for Subject Records Service."""

from services.state.subject_records.data.repository import PostgresSubjectRepository
from services.state.subject_records.data.runtime import (
    SubjectRecordsPostgresRuntime,
    subject_records_schema,
)

__all__ = [
    "PostgresSubjectRepository",
    "SubjectRecordsPostgresRuntime",
    "subject_records_schema",
]

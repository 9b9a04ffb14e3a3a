"""Audit record pipeline: collection, provenance, and delivery with retry."""

from packages.knaudit_core.assembler import AuditRecordAssembler
from packages.knaudit_core.errors import (
    AmbiguousRefError,
    CollectionError,
    DeliveryError,
    KnauditError,
    MissingFieldsError,
    NoOwnerFoundError,
    NotFoundError,
    ProvenanceLookupError,
    RepoNotFoundError,
)
from packages.knaudit_core.pipeline import (
    PipelineResult,
    build_assembler,
    deliver_record,
    run_pipeline,
)
from packages.knaudit_core.provenance import ProvenanceResolver
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_core.retry import RetryPolicy, run_with_retry, with_retry
from packages.knaudit_core.sink import AuditSink

__all__ = [
    "AmbiguousRefError",
    "AuditRecord",
    "AuditRecordAssembler",
    "AuditSink",
    "CollectionError",
    "DeliveryError",
    "KnauditError",
    "MissingFieldsError",
    "NoOwnerFoundError",
    "NotFoundError",
    "PipelineResult",
    "ProvenanceLookupError",
    "ProvenanceResolver",
    "RepoNotFoundError",
    "RetryPolicy",
    "build_assembler",
    "deliver_record",
    "run_pipeline",
    "run_with_retry",
    "with_retry",
]

"""Assemble one audit record and deliver it under the retry policy."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from packages.knaudit_core.assembler import AuditRecordAssembler
from packages.knaudit_core.provenance import ProvenanceResolver
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_core.retry import RetryPolicy, run_with_retry
from packages.knaudit_core.sink import AuditSink
from packages.knaudit_shared.config import KnauditSettings
from packages.knaudit_shared.logging import fields, get_logger, log_context, log_fields

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """What was delivered, where, and after how many attempts."""

    record: AuditRecord
    backend: str
    attempts: int


def build_assembler(settings: KnauditSettings) -> AuditRecordAssembler:
    """Wire the assembler from the settings sections it needs."""
    return AuditRecordAssembler(
        run=settings.run,
        git=settings.git,
        record=settings.record,
        resolver=ProvenanceResolver(settings.provenance),
    )


def deliver_record(
    record: AuditRecord,
    sink: AuditSink,
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Deliver ``record`` through ``sink``; return the number of attempts used."""
    with log_context({fields.BACKEND: sink.name}):
        outcome = run_with_retry(
            policy,
            lambda: sink.deliver(record),
            sleep=sleep,
            description=f"audit record delivery to {sink.name}",
        )
        _LOGGER.info(
            "audit record delivered",
            extra=log_fields(attempt=outcome.attempts),
        )
    return outcome.attempts


def run_pipeline(
    settings: KnauditSettings,
    *,
    sink: AuditSink,
    assembler: AuditRecordAssembler | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Run collection, resolution and delivery as one linear sequence."""
    record = (assembler or build_assembler(settings)).assemble()
    attempts = deliver_record(
        record,
        sink,
        RetryPolicy.from_settings(settings.retry),
        sleep=sleep,
    )
    return PipelineResult(record=record, backend=sink.name, attempts=attempts)

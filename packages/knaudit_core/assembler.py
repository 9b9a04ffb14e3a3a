"""Collect every field of the audit record and build it once."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import ValidationError

from packages.knaudit_core import git_context, host, timestamps
from packages.knaudit_core.errors import CollectionError, MissingFieldsError
from packages.knaudit_core.provenance import ProvenanceResolver
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_shared.config import (
    GitSettings,
    RecordSettings,
    RunSettings,
)
from packages.knaudit_shared.logging import get_logger

_LOGGER = get_logger(__name__)


class AuditRecordAssembler:
    """Combine run settings, host identity, provenance and git context."""

    def __init__(
        self,
        *,
        run: RunSettings,
        git: GitSettings,
        record: RecordSettings,
        resolver: ProvenanceResolver,
        ip_lookup: Callable[[], str] = host.local_ipv4,
        clock: timestamps.Clock = timestamps.utc_now,
    ) -> None:
        self._run = run
        self._git = git
        self._record = record
        self._resolver = resolver
        self._ip_lookup = ip_lookup
        self._clock = clock

    def assemble(self) -> AuditRecord:
        """Return the complete record or raise before anything is delivered."""
        self._require_run_identifiers()
        run = self._run

        hostname = host.host_name(run.hostname)
        ip = self._ip_lookup()
        triggered_by = self._resolver.resolve(run.dag_id, run.run_id)
        git = git_context.read_git_context(self._git.repo_path, self._git.allowed_orgs)

        try:
            record = AuditRecord(
                hostname=hostname,
                ip=ip,
                namespace=run.namespace,
                dag_id=run.dag_id,
                run_id=run.run_id,
                task_id=run.task_id,
                triggered_by=triggered_by,
                commit_sha1=git.commit_sha1,
                git_branch=git.branch,
                git_repo=git.repo,
                timestamp=self._timestamp(),
            )
        except ValidationError as exc:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
            raise CollectionError(
                f"audit record is incomplete: {', '.join(fields) or exc}"
            ) from exc

        _LOGGER.info("audit record assembled")
        return record

    def _require_run_identifiers(self) -> None:
        missing = [
            f"run.{name}"
            for name in ("namespace", "dag_id", "run_id", "task_id")
            if not getattr(self._run, name).strip()
        ]
        if missing:
            raise MissingFieldsError(missing)

    def _timestamp(self) -> str:
        if self._record.timestamp_source == "run_id":
            return timestamps.run_id_timestamp(self._run.run_id)
        return timestamps.current_timestamp(self._clock)

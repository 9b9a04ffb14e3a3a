"""The audit record emitted once per workflow task execution."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class AuditRecord(BaseModel):
    """Immutable set of string fields describing one run.

    Validation rejects blank fields, so an instance is always complete.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hostname: NonEmptyStr
    ip: NonEmptyStr
    namespace: NonEmptyStr
    dag_id: NonEmptyStr
    run_id: NonEmptyStr
    task_id: NonEmptyStr
    triggered_by: NonEmptyStr
    commit_sha1: NonEmptyStr
    git_branch: NonEmptyStr
    git_repo: NonEmptyStr
    timestamp: NonEmptyStr

    def as_dict(self) -> dict[str, str]:
        """Return a plain ``dict`` copy for clients that take a mapping body."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Serialize to compact JSON; equal records always serialize identically."""
        return self.model_dump_json()

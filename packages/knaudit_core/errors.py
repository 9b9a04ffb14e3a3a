"""Failure taxonomy for assembling and delivering one audit record.

Assembly failures (``CollectionError``, ``NotFoundError``, provenance errors)
abort before any delivery attempt. ``DeliveryError`` is the only retryable
failure and is raised by sinks.
"""

from __future__ import annotations

from collections.abc import Mapping

from packages.knaudit_shared.errors import ErrorCategory, ErrorDetail, codes


class KnauditError(Exception):
    """Base class for every expected knaudit failure."""

    code: str = codes.COLLECTION_FAILED
    category: ErrorCategory = ErrorCategory.INTERNAL
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def metadata(self) -> Mapping[str, str]:
        """Return structured fields describing this failure."""
        return {}

    def to_error_detail(self) -> ErrorDetail:
        """Convert into the shared structured error shape."""
        return ErrorDetail(
            code=self.code,
            message=self.message,
            category=self.category,
            retryable=self.retryable,
            metadata={"exception_type": type(self).__name__, **self.metadata()},
        )


class CollectionError(KnauditError):
    """Required environment or filesystem input is missing or unreadable."""

    code = codes.COLLECTION_FAILED
    category = ErrorCategory.VALIDATION


class MissingFieldsError(CollectionError):
    """One or more required settings are empty."""

    code = codes.MISSING_REQUIRED_FIELD

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"missing required settings: {', '.join(missing)}")
        self.missing = tuple(missing)

    def metadata(self) -> Mapping[str, str]:
        return {"missing": ",".join(self.missing)}


class NotFoundError(KnauditError):
    """Git metadata needed for the record could not be found."""

    code = codes.GIT_REF_NOT_FOUND
    category = ErrorCategory.NOT_FOUND

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def metadata(self) -> Mapping[str, str]:
        return {"path": self.path} if self.path else {}


class AmbiguousRefError(NotFoundError):
    """Several branch refs exist and nothing says which one is checked out."""

    code = codes.GIT_REF_AMBIGUOUS

    def __init__(self, refs: list[str], *, path: str) -> None:
        super().__init__(
            f"found {len(refs)} refs under {path} ({', '.join(refs)}) "
            "and HEAD does not name one of them",
            path=path,
        )
        self.refs = tuple(refs)


class RepoNotFoundError(NotFoundError):
    """No allow-listed GitHub URL was found in the repository config."""

    code = codes.GIT_REPO_NOT_FOUND


class NoOwnerFoundError(KnauditError):
    """No trigger event exists for a run that was not scheduled."""

    code = codes.NO_OWNER_FOUND
    category = ErrorCategory.NOT_FOUND

    def __init__(self, dag_id: str) -> None:
        super().__init__(f"no owner found for DAG '{dag_id}'")
        self.dag_id = dag_id

    def metadata(self) -> Mapping[str, str]:
        return {"dag_id": self.dag_id}


class ProvenanceLookupError(KnauditError):
    """The metadata database could not be reached or queried."""

    code = codes.PROVENANCE_LOOKUP_FAILED
    category = ErrorCategory.DEPENDENCY


class DeliveryError(KnauditError):
    """A sink failed to store the record on one attempt."""

    code = codes.DELIVERY_FAILED
    category = ErrorCategory.DEPENDENCY
    retryable = True

    def __init__(
        self,
        message: str,
        *,
        backend: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.backend = backend
        self.status_code = status_code
        self.response_body = response_body

    def metadata(self) -> Mapping[str, str]:
        values = {"backend": self.backend}
        if self.status_code is not None:
            values["status_code"] = str(self.status_code)
        if self.response_body:
            values["response_body"] = self.response_body
        return values

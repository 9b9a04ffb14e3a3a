"""Process-local logging context for knaudit.

Fields bound here (service, workflow run identifiers, active backend) are
stamped onto every log line by ``ContextFilter``. The store is a
``contextvars.ContextVar`` so tests can bind and reset without leaking state.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

from . import fields

_BOUND: ContextVar[Mapping[str, str]] = ContextVar("knaudit_log_context", default={})


def _with_values(base: Mapping[str, str], values: Mapping[str, object]) -> dict[str, str]:
    """Return ``base`` plus the stringified non-blank ``values``."""
    merged = dict(base)
    merged.update(
        (str(key), str(value))
        for key, value in values.items()
        if value is not None and str(value) != ""
    )
    return merged


def get_context() -> dict[str, str]:
    return dict(_BOUND.get())


def bind_context(**values: object) -> None:
    """Add fields to every following log line; ``None`` and blanks are skipped."""
    _BOUND.set(_with_values(_BOUND.get(), values))


def bind_run_context(*, dag_id: str, run_id: str, task_id: str) -> None:
    """Bind the workflow run identifiers every audit log line should carry."""
    bind_context(
        **{fields.DAG_ID: dag_id, fields.RUN_ID: run_id, fields.TASK_ID: task_id}
    )


def clear_context(*keys: str) -> None:
    """Drop the named fields, or all of them when none are named."""
    if keys:
        _BOUND.set({key: value for key, value in _BOUND.get().items() if key not in keys})
    else:
        _BOUND.set({})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` inside the block only; the previous fields come back after."""
    token = _BOUND.set(_with_values(_BOUND.get(), values))
    try:
        yield
    finally:
        _BOUND.reset(token)

"""Canonical logging field names for structured knaudit logs.

These are the keys bound into the logging context or written by the
formatters; per-call fields are passed to ``log_fields`` by name.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Workflow run correlation fields.
DAG_ID = "dag_id"
RUN_ID = "run_id"
TASK_ID = "task_id"

# Active delivery backend.
BACKEND = "backend"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

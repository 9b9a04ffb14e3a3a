"""Public shared HTTP API for knaudit packages."""

from .client import HttpClient, status_error
from .errors import HttpError, HttpRequestError, HttpStatusError

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequestError",
    "HttpStatusError",
    "status_error",
]

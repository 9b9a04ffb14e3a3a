"""Deliver audit records to the audit proxy with one JSON POST."""

from __future__ import annotations

import ssl

import httpx

from packages.knaudit_core.errors import CollectionError, DeliveryError
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_core.sink import AuditSink
from packages.knaudit_shared.http import HttpClient, HttpRequestError, HttpStatusError
from packages.knaudit_shared.logging import get_logger, log_fields
from resources.adapters.proxy.config import ProxySinkSettings

_LOGGER = get_logger(__name__)


class ProxySink(AuditSink):
    """POST ``<base_url>/report``; only the configured status counts as success."""

    name = "proxy"

    def __init__(
        self,
        *,
        settings: ProxySinkSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._verify = _verify_option(settings.ca_certs)

    def deliver(self, record: AuditRecord) -> None:
        payload = record.to_json()
        try:
            with HttpClient(
                base_url=self._settings.base_url,
                timeout_seconds=self._settings.timeout_seconds,
                headers={"Content-Type": "application/json"},
                verify=self._verify,
                transport=self._transport,
            ) as client:
                response = client.post(
                    self._settings.report_path,
                    content=payload,
                    accept_status={self._settings.success_status},
                )
        except HttpStatusError as exc:
            raise DeliveryError(
                f"posting audit record to proxy returned status code {exc.status_code}, "
                f"response: {exc.response_body}",
                backend=self.name,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc
        except HttpRequestError as exc:
            raise DeliveryError(
                f"posting audit record to proxy failed: {exc}",
                backend=self.name,
            ) from exc

        _LOGGER.debug(
            "proxy accepted audit record",
            extra=log_fields(status_code=response.status_code),
        )


def _verify_option(ca_certs: str | None) -> ssl.SSLContext | bool:
    """Return TLS verification trusting ``ca_certs`` when one is configured."""
    if not ca_certs:
        return True
    try:
        return ssl.create_default_context(cafile=ca_certs)
    except (OSError, ssl.SSLError) as exc:
        raise CollectionError(f"cannot load CA certificates from {ca_certs}: {exc}") from exc

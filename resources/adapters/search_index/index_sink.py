"""Deliver audit records as documents in an Elasticsearch index."""

from __future__ import annotations

from collections.abc import Callable
from uuid import uuid4

from elasticsearch import ApiError, Elasticsearch, TransportError

from packages.knaudit_core.errors import CollectionError, DeliveryError
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_core.sink import AuditSink
from packages.knaudit_shared.logging import get_logger, log_fields
from resources.adapters.search_index.config import ElasticsearchSinkSettings

_LOGGER = get_logger(__name__)

ClientFactory = Callable[[], Elasticsearch]


def new_document_id() -> str:
    """Mint a random document id; each delivery attempt gets its own."""
    return str(uuid4())


class ElasticsearchSink(AuditSink):
    """Index the record with ``refresh=True`` so it is searchable at once."""

    name = "elasticsearch"

    def __init__(
        self,
        *,
        settings: ElasticsearchSinkSettings,
        client_factory: ClientFactory | None = None,
        id_factory: Callable[[], str] = new_document_id,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or self._build_client
        self._id_factory = id_factory

    def deliver(self, record: AuditRecord) -> None:
        document = record.as_dict()
        document_id = self._id_factory()
        try:
            client = self._client_factory()
        except ValueError as exc:
            raise CollectionError(
                f"cannot configure Elasticsearch client for {list(self._settings.hosts)}: {exc}"
            ) from exc
        try:
            response = client.index(
                index=self._settings.index,
                id=document_id,
                document=document,
                refresh=True,
            )
        except ApiError as exc:
            raise DeliveryError(
                f"indexing audit record into '{self._settings.index}' failed "
                f"with status {exc.meta.status}: {exc.message}",
                backend=self.name,
                status_code=exc.meta.status,
                response_body=str(exc.body),
            ) from exc
        except TransportError as exc:
            raise DeliveryError(
                f"indexing audit record into '{self._settings.index}' failed: {exc}",
                backend=self.name,
            ) from exc
        finally:
            client.close()

        _LOGGER.info(
            "audit record indexed",
            extra=log_fields(document_id=document_id, result=response.get("result")),
        )

    def _build_client(self) -> Elasticsearch:
        basic_auth = None
        if self._settings.username and self._settings.password:
            basic_auth = (self._settings.username, self._settings.password)
        return Elasticsearch(
            hosts=list(self._settings.hosts),
            basic_auth=basic_auth,
            ca_certs=self._settings.ca_certs,
            request_timeout=self._settings.request_timeout_seconds,
        )

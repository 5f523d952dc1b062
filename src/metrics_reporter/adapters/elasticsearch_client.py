"""
Elasticsearch Storage Client.

Adapts a callback-style Elasticsearch client, one exposing
``ping(callback)`` and ``bulk({"index": ..., "body": [...]}, callback)``
with ``callback(err, response)``, to the StorageClient protocol.

    probe(cb)                  -> es.ping(cb)
    write(target, records, cb) -> es.bulk({"index": target,
                                          "body": Batch(...).to_bulk_body()}, cb)

A bulk response reporting ``"errors": true`` fails the write even though
the request itself succeeded.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from metrics_reporter.domain.entities import Batch, WriteRecord
from metrics_reporter.domain.errors import WriteError

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Optional[Any]], None]


class ElasticsearchStorageClient:
    """StorageClient backed by an Elasticsearch client's ping and bulk calls."""

    def __init__(self, es_client: Any) -> None:
        """
        Args:
            es_client: Object with ping(callback) and bulk(params, callback)

        Raises:
            TypeError: If es_client lacks ping or bulk
        """
        missing = [m for m in ("ping", "bulk") if not callable(getattr(es_client, m, None))]
        if missing:
            raise TypeError(
                f"Elasticsearch client must provide {' and '.join(missing)}()"
            )
        self._es = es_client

    @property
    def es_client(self) -> Any:
        return self._es

    def probe(self, callback: CompletionCallback) -> None:
        def on_ping(err: Optional[Any] = None, response: Any = None) -> None:
            callback(err)

        self._es.ping(on_ping)

    def write(
        self,
        target: str,
        records: Sequence[WriteRecord],
        callback: CompletionCallback,
    ) -> None:
        params = {
            "index": target,
            "body": Batch(target=target, records=list(records)).to_bulk_body(),
        }

        def on_bulk(err: Optional[Any] = None, response: Any = None) -> None:
            if err is None and isinstance(response, Mapping) and response.get("errors"):
                logger.debug(f"Bulk response for {target} reported item errors")
                err = WriteError(
                    f"Bulk request to '{target}' had failed items",
                    target=target,
                    detail=response,
                )
            callback(err)

        self._es.bulk(params, on_bulk)

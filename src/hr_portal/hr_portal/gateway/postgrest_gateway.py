from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..core.exceptions import PersistenceError
from .base import ChannelKey, DataGateway, Disposer, Filters, Row, RowCallback
from .change_feed import ChangeFeed
from .connection import GatewayConnection
from .realtime import open_realtime_channel
from .rest_base import http_session, json_ready, parse_content_range, query_params, send

RETURN_ROWS = {"Prefer": "return=representation"}


class PostgrestGateway(DataGateway):
    def __init__(self, conn_factory: GatewayConnection, *, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed or ChangeFeed(open_realtime_channel(conn_factory.config))

    def _url(self, table: str) -> str:
        return f"{self._conn_factory.config.rest_url}/{table}"

    @property
    def _timeout(self) -> float:
        return self._conn_factory.config.timeout

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        with http_session(self._conn_factory) as s:
            r = send(s, "POST", self._url(table), timeout=self._timeout, json=[json_ready(values)], headers=RETURN_ROWS)
            rows = r.json()
        if not rows:
            raise PersistenceError(f"Insert into {table} returned no row")
        return rows[0]

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        params = query_params(filters, columns=columns, order_by=order_by, descending=descending, limit=limit)
        with http_session(self._conn_factory) as s:
            r = send(s, "GET", self._url(table), timeout=self._timeout, params=params)
            return list(r.json() or [])

    def count(self, table: str, *, filters: Optional[Filters] = None) -> int:
        params = query_params(filters, columns="*")
        with http_session(self._conn_factory) as s:
            r = send(s, "HEAD", self._url(table), timeout=self._timeout, params=params, headers={"Prefer": "count=exact"})
            return parse_content_range(r.headers.get("Content-Range"))

    def update(self, table: str, values: Mapping[str, Any], *, filters: Filters) -> List[Row]:
        if not filters:
            raise ValueError("update() requires at least one filter")
        with http_session(self._conn_factory) as s:
            r = send(
                s,
                "PATCH",
                self._url(table),
                timeout=self._timeout,
                params=query_params(filters),
                json=json_ready(values),
                headers=RETURN_ROWS,
            )
            return list(r.json() or [])

    def delete(self, table: str, *, filters: Filters) -> List[Row]:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        with http_session(self._conn_factory) as s:
            r = send(s, "DELETE", self._url(table), timeout=self._timeout, params=query_params(filters), headers=RETURN_ROWS)
            return list(r.json() or [])

    def subscribe(
        self,
        table: str,
        callback: RowCallback,
        *,
        event: str = "INSERT",
        schema: str = "public",
    ) -> Disposer:
        return self._feed.subscribe(ChannelKey(table=table, event=event, schema=schema), callback)

    def close(self) -> None:
        self._feed.close()

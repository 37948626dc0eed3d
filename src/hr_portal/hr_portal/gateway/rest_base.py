from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Type

import requests

from ..core.exceptions import DomainError, PersistenceError
from .connection import GatewayConnection


@contextmanager
def http_session(conn_factory: GatewayConnection) -> Iterator[requests.Session]:
    session = conn_factory.connect()
    try:
        yield session
    finally:
        session.close()


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float,
    error_cls: Type[DomainError] = PersistenceError,
    **kwargs: Any,
) -> requests.Response:
    """Issue one request; transport failures and non-2xx answers raise ``error_cls``."""
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise error_cls(f"{method} {url} failed: {e}") from e
    if not response.ok:
        raise error_cls(error_message(response))
    return response


def error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return f"{response.status_code} {body[key]}"
    return f"{response.status_code} {response.text[:200]}"


def to_wire(value: Any) -> Any:
    """Convert enums and dates into JSON-compatible values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def json_ready(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: to_wire(v) for k, v in values.items()}


def encode_filter(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return "eq.true" if value else "eq.false"
    return f"eq.{to_wire(value)}"


def query_params(
    filters: Optional[Mapping[str, Any]] = None,
    *,
    columns: Optional[str] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if columns:
        params["select"] = columns
    for column, value in (filters or {}).items():
        params[column] = encode_filter(value)
    if order_by:
        params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
    if limit is not None:
        params["limit"] = str(int(limit))
    return params


def parse_content_range(value: Optional[str]) -> int:
    """Extract the exact total from a ``Content-Range`` header (``0-9/42``, ``*/0``)."""
    if not value or "/" not in value:
        raise PersistenceError(f"Missing row count in Content-Range: {value!r}")
    total = value.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        raise PersistenceError(f"Row count not available: {value!r}")
    return int(total)

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

Row = Dict[str, Any]
Filters = Mapping[str, Any]
RowCallback = Callable[[Row], None]
Disposer = Callable[[], None]


@dataclass(frozen=True)
class ChannelKey:
    """Change-feed scope: one event type on one table."""

    table: str
    event: str = "INSERT"
    schema: str = "public"


class DataGateway(Protocol):
    """Collection-scoped operations of the hosted data store.

    Filters are equality matches (``None`` matches NULL). Every operation either
    returns its payload or raises ``PersistenceError``.
    """

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        raise NotImplementedError

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
        raise NotImplementedError

    def count(self, table: str, *, filters: Optional[Filters] = None) -> int:
        """Count-only query; row bodies are never transferred."""

        raise NotImplementedError

    def update(self, table: str, values: Mapping[str, Any], *, filters: Filters) -> List[Row]:
        """Return the updated rows (empty when nothing matched)."""

        raise NotImplementedError

    def delete(self, table: str, *, filters: Filters) -> List[Row]:
        """Return the deleted rows (empty when nothing matched)."""

        raise NotImplementedError

    def subscribe(
        self,
        table: str,
        callback: RowCallback,
        *,
        event: str = "INSERT",
        schema: str = "public",
    ) -> Disposer:
        raise NotImplementedError

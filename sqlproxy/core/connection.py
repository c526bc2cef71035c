"""Connection records shared between a connection proxy and its statements."""

import itertools
import threading
import uuid
from typing import Any, Optional

__all__ = ("ConnectionIdManager", "ConnectionInfo", "DefaultConnectionIdManager", "UuidConnectionIdManager")


class ConnectionInfo:
    """Identity and lifecycle counters of one proxied connection.

    Counters may be updated from any thread; access goes through a lock.
    """

    __slots__ = (
        "_closed",
        "_commit_count",
        "_lock",
        "_rollback_count",
        "connection_id",
        "data_source_name",
        "isolation_level",
    )

    def __init__(
        self,
        connection_id: "Optional[str]" = None,
        data_source_name: "Optional[str]" = None,
        isolation_level: "Optional[str]" = None,
    ) -> None:
        self.connection_id = connection_id
        self.data_source_name = data_source_name
        self.isolation_level = isolation_level
        self._lock = threading.Lock()
        self._commit_count = 0
        self._rollback_count = 0
        self._closed = False

    def increment_commit_count(self) -> int:
        with self._lock:
            self._commit_count += 1
            return self._commit_count

    def increment_rollback_count(self) -> int:
        with self._lock:
            self._rollback_count += 1
            return self._rollback_count

    def mark_closed(self) -> None:
        with self._lock:
            self._closed = True

    @property
    def commit_count(self) -> int:
        with self._lock:
            return self._commit_count

    @property
    def rollback_count(self) -> int:
        with self._lock:
            return self._rollback_count

    @property
    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    def __repr__(self) -> str:
        return (
            f"ConnectionInfo(connection_id={self.connection_id!r}, data_source_name={self.data_source_name!r}, "
            f"commits={self.commit_count}, rollbacks={self.rollback_count}, closed={self.is_closed})"
        )


class ConnectionIdManager:
    """Assigns connection ids and tracks which of them are still open."""

    __slots__ = ("_lock", "_open_ids")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._open_ids: set[str] = set()

    def _next_id(self, connection: Any) -> str:
        raise NotImplementedError

    def get_id(self, connection: Any) -> str:
        connection_id = self._next_id(connection)
        with self._lock:
            self._open_ids.add(connection_id)
        return connection_id

    def add_closed_id(self, connection_id: "Optional[str]") -> None:
        if connection_id is None:
            return
        with self._lock:
            self._open_ids.discard(connection_id)

    def get_open_ids(self) -> "frozenset[str]":
        with self._lock:
            return frozenset(self._open_ids)


class DefaultConnectionIdManager(ConnectionIdManager):
    """Sequential ids starting at ``"1"``."""

    __slots__ = ("_counter",)

    def __init__(self) -> None:
        super().__init__()
        self._counter = itertools.count(1)

    def _next_id(self, connection: Any) -> str:
        with self._lock:
            return str(next(self._counter))


class UuidConnectionIdManager(ConnectionIdManager):
    """Random UUID ids, unique across processes."""

    __slots__ = ()

    def _next_id(self, connection: Any) -> str:
        return str(uuid.uuid4())

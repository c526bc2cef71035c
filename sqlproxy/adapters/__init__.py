"""Driver adapters exposing the statement call surface."""

from sqlproxy.adapters.dbapi import (
    DBAPICallableStatement,
    DBAPIConnection,
    DBAPIPreparedStatement,
    DBAPIResultSet,
    DBAPIStatement,
    dbapi_connector,
)

__all__ = (
    "DBAPICallableStatement",
    "DBAPIConnection",
    "DBAPIPreparedStatement",
    "DBAPIResultSet",
    "DBAPIStatement",
    "dbapi_connector",
)

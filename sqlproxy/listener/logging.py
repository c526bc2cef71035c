"""Listener writing one log entry per query execution."""

import logging
from typing import TYPE_CHECKING, Optional

from sqlproxy.listener.formatting import DefaultQueryLogEntryCreator
from sqlproxy.utils.logging import get_correlation_id, get_logger

if TYPE_CHECKING:
    from sqlproxy.core.execution import ExecutionInfo

__all__ = ("LoggingQueryListener",)


class LoggingQueryListener:
    """Logs every execution once it completed.

    Args:
        logger: Destination logger, ``sqlproxy.query`` by default.
        level: Log level of the entries.
        log_entry_creator: Renders the entry text.
        write_as_json: Render entries as JSON instead of text.
        write_data_source_name: Include the data source name in entries.
    """

    __slots__ = ("_level", "_log_entry_creator", "_logger", "_write_as_json", "_write_data_source_name")

    def __init__(
        self,
        logger: "Optional[logging.Logger]" = None,
        level: int = logging.INFO,
        log_entry_creator: "Optional[DefaultQueryLogEntryCreator]" = None,
        write_as_json: bool = False,
        write_data_source_name: bool = True,
    ) -> None:
        self._logger = logger or get_logger("query")
        self._level = level
        self._log_entry_creator = log_entry_creator or DefaultQueryLogEntryCreator()
        self._write_as_json = write_as_json
        self._write_data_source_name = write_data_source_name

    def before_query(self, execution_info: "ExecutionInfo") -> None:
        return

    def after_query(self, execution_info: "ExecutionInfo") -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        if self._write_as_json:
            entry = self._log_entry_creator.get_log_entry_as_json(
                execution_info, execution_info.queries, self._write_data_source_name
            )
        else:
            entry = self._log_entry_creator.get_log_entry(
                execution_info, execution_info.queries, self._write_data_source_name
            )
        self._logger.log(
            self._level,
            entry,
            extra={
                "correlation_id": get_correlation_id(),
                "extra_fields": {
                    "data_source": execution_info.data_source_name,
                    "connection_id": execution_info.connection_id,
                    "elapsed_ms": execution_info.elapsed_ms,
                    "success": execution_info.success,
                },
            },
        )

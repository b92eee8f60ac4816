import logging
from typing import Any, Protocol

logger = logging.getLogger("library_api.search.events")


class SearchEventSink(Protocol):
    def emit(self, event: str, **fields: Any) -> None: ...


class LoggingSearchEventSink:
    """Forward search events to the structured log."""

    def __init__(self, level: int = logging.WARNING):
        self.level = level

    def emit(self, event: str, **fields: Any) -> None:
        logger.log(self.level, event, extra=fields)

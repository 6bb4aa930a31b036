"""
Event Logger

Every ledger notification is written to the structured log, giving a
local trace of what changed and when.

The event logger:
- Subscribes to the store's notification channel like any other observer
- Never raises into the store (the bus isolates listener failures)
- Renders JSON lines by default, console output when configured
"""

import logging
from typing import Callable, Optional

import structlog

from pocketledger.config import LoggingSettings
from pocketledger.models.events import LedgerEvent


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call more than once; the last call wins.
    """
    settings = settings or LoggingSettings()

    logging.basicConfig(format="%(message)s", level=settings.level)
    logging.getLogger().setLevel(settings.level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class EventLogger:
    """
    Writes one `ledger_event` log record per notification.

    Deletions are logged at warning level so they stand out when
    reading back a session.
    """

    def __init__(self, logger=None):
        self._logger = logger or structlog.get_logger(__name__)

    def __call__(self, event: LedgerEvent) -> None:
        self.log(event)

    def log(self, event: LedgerEvent) -> None:
        log_dict = event.to_log_dict()

        if event.kind == "deleted":
            self._logger.warning("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def attach(self, subscribe: Callable[[Callable[[LedgerEvent], None]], Callable[[], None]]) -> Callable[[], None]:
        """
        Register with a subscribe function (e.g. `store.subscribe`).

        Returns the unsubscribe handle.
        """
        return subscribe(self)

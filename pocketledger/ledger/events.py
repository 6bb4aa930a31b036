"""
Change Notification Bus

A small synchronous observer registry. Listeners are called in
registration order, after the snapshot has been written back.

A listener that raises is logged and skipped; the remaining listeners
still run and the mutation that triggered the event is not affected.
Mutating the store from inside a listener is not supported.
"""

from typing import Callable

import structlog

from pocketledger.models.events import LedgerEvent


Listener = Callable[[LedgerEvent], None]

logger = structlog.get_logger(__name__)


class LedgerEventBus:
    """Typed channel for ledger notifications."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns a handle that removes the listener when called.
        Calling the handle more than once is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: LedgerEvent) -> None:
        # Copy so listeners can unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    "ledger_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    kind=event.kind,
                    operation=event.operation.value,
                    error=str(e),
                )

    def __len__(self) -> int:
        return len(self._listeners)

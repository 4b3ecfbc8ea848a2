"""
Store Audit Logger

Every state change in the store is logged and announced to observers.

The audit logger:
- Always writes the event to the structured log
- Fans the event out to subscribed observers (the UI)
- Gracefully handles observer failures (a broken observer never breaks a save)
"""

import logging
import sys
from typing import Callable, Optional

import structlog

from demobank.models.audit import StoreEvent, StoreEventBuilder, StoreEventSeverity
from demobank.models.records import EntityKind


StoreObserver = Callable[[StoreEvent], None]


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
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


class StoreAuditLogger:
    """
    Central store event service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Subscribed observers (for UI refresh)
    """

    def __init__(self, observers: Optional[list[StoreObserver]] = None):
        self._observers: list[StoreObserver] = list(observers or [])
        self._logger = structlog.get_logger(__name__)

    def subscribe(self, observer: StoreObserver) -> Callable[[], None]:
        """
        Register an observer.

        Returns a callable that removes the observer again.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def log(self, event: StoreEvent) -> None:
        """Log an event and notify observers."""
        log_dict = event.to_log_dict()

        if event.severity is StoreEventSeverity.ERROR:
            self._logger.error("store_event", **log_dict)
        elif event.severity is StoreEventSeverity.WARNING:
            self._logger.warning("store_event", **log_dict)
        elif event.severity is StoreEventSeverity.DEBUG:
            self._logger.debug("store_event", **log_dict)
        else:
            self._logger.info("store_event", **log_dict)

        for observer in list(self._observers):
            try:
                observer(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "store_observer_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                    exc_info=True,
                )

    def log_data_loaded(
        self,
        persona_id: str,
        counts: dict[str, int],
        with_overrides: bool = True,
    ) -> None:
        self.log(StoreEventBuilder.data_loaded(persona_id, counts, with_overrides))

    def log_record_saved(self, persona_id: str, kind: EntityKind, record_id, created: bool) -> None:
        self.log(StoreEventBuilder.record_saved(persona_id, kind, record_id, created))

    def log_persist_failed(self, persona_id: str, kind: EntityKind, record_id, error: str) -> None:
        self.log(StoreEventBuilder.persist_failed(persona_id, kind, record_id, error))

    def log_overrides_reset(self, persona_id: str) -> None:
        self.log(StoreEventBuilder.overrides_reset(persona_id))

    def log_persona_switched(self, persona_id: str, previous_id: str) -> None:
        self.log(StoreEventBuilder.persona_switched(persona_id, previous_id))

    def log_persona_rejected(self, current_id: str, requested_id: str) -> None:
        self.log(StoreEventBuilder.persona_rejected(current_id, requested_id))

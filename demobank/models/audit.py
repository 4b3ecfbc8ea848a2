"""
Store Event Models

Every state change of the DataManager is described by a StoreEvent.
Events are:
1. Written to the structured log
2. Delivered to subscribed observers (the UI refreshes on them)

DESIGN DECISION: Events are notifications, not a journal. They are never
replayed to rebuild state - the override snapshots do that.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from demobank.models.records import EntityKind


class StoreEventType(str, Enum):
    """Types of store events."""
    # Loading
    DATA_LOADED = "data_loaded"

    # Mutation
    RECORD_SAVED = "record_saved"
    PERSIST_FAILED = "persist_failed"

    # Lifecycle
    OVERRIDES_RESET = "overrides_reset"
    PERSONA_SWITCHED = "persona_switched"
    PERSONA_REJECTED = "persona_rejected"


class StoreEventSeverity(str, Enum):
    """Severity level for store events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreEvent(BaseModel):
    """
    A single store event.

    ``persona_id`` is always the persona the event happened under.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC, wall clock)"
    )

    # Event classification
    event_type: StoreEventType
    severity: StoreEventSeverity = StoreEventSeverity.INFO

    # Context - what is this about?
    persona_id: str
    entity_kind: Optional[EntityKind] = None
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "persona_id": self.persona_id,
            "entity_kind": self.entity_kind.value if self.entity_kind else None,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class StoreEventBuilder:
    """
    Helper class to build store events with common patterns.

    Usage:
        event = StoreEventBuilder.record_saved(
            persona_id="john",
            kind=EntityKind.INVOICES,
            record_id=invoice.id,
            created=False,
        )
    """

    @staticmethod
    def data_loaded(
        persona_id: str,
        counts: dict[str, int],
        with_overrides: bool,
    ) -> StoreEvent:
        source = "fixtures and overrides" if with_overrides else "fixtures only"
        return StoreEvent(
            event_type=StoreEventType.DATA_LOADED,
            persona_id=persona_id,
            description=f"Loaded data for {persona_id} from {source}",
            details={"counts": counts, "with_overrides": with_overrides},
        )

    @staticmethod
    def record_saved(
        persona_id: str,
        kind: EntityKind,
        record_id: UUID,
        created: bool,
    ) -> StoreEvent:
        action = "Added" if created else "Updated"
        return StoreEvent(
            event_type=StoreEventType.RECORD_SAVED,
            persona_id=persona_id,
            entity_kind=kind,
            entity_id=record_id,
            description=f"{action} {kind.storage_key} record",
            details={"created": created},
        )

    @staticmethod
    def persist_failed(
        persona_id: str,
        kind: EntityKind,
        record_id: Optional[UUID],
        error: str,
    ) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.PERSIST_FAILED,
            severity=StoreEventSeverity.ERROR,
            persona_id=persona_id,
            entity_kind=kind,
            entity_id=record_id,
            description=f"Could not persist {kind.storage_key} overrides",
            error_message=error,
        )

    @staticmethod
    def overrides_reset(persona_id: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.OVERRIDES_RESET,
            persona_id=persona_id,
            description=f"Cleared overrides for {persona_id}",
        )

    @staticmethod
    def persona_switched(persona_id: str, previous_id: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.PERSONA_SWITCHED,
            persona_id=persona_id,
            description=f"Switched persona from {previous_id} to {persona_id}",
            details={"previous_persona_id": previous_id},
        )

    @staticmethod
    def persona_rejected(current_id: str, requested_id: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.PERSONA_REJECTED,
            severity=StoreEventSeverity.WARNING,
            persona_id=current_id,
            description=f"Unknown persona requested: {requested_id}",
            details={"requested_persona_id": requested_id},
        )

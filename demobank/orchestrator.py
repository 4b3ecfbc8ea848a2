"""
Application Wiring for Demo Bank

Builds the store once at startup from settings. The returned components
are handed to the screens; nothing here is global.
"""

from typing import NamedTuple, Optional

import structlog

from demobank.audit import StoreAuditLogger, configure_logging
from demobank.config import Settings, get_settings
from demobank.models.persona import DEFAULT_PERSONAS, PersonaRegistry
from demobank.queries import DerivedQueries
from demobank.services.clock import Clock
from demobank.services.data_manager import DataManager
from demobank.services.storage import (
    JsonFileOverrideStorage,
    JsonFixtureLoader,
    OverrideStorageInterface,
)


logger = structlog.get_logger(__name__)


class AppComponents(NamedTuple):
    """Everything a screen needs."""
    clock: Clock
    data_manager: DataManager
    queries: DerivedQueries
    audit_logger: StoreAuditLogger


def create_app_components(
    settings: Optional[Settings] = None,
    override_storage: Optional[OverrideStorageInterface] = None,
    configure_logs: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; the cached environment settings if None
        override_storage: Replaces the file-backed override store
                          (e.g. InMemoryOverrideStorage for a throwaway session)
        configure_logs: Apply the logging settings to structlog

    Returns:
        AppComponents(clock, data_manager, queries, audit_logger)
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    clock_settings = settings.clock

    if configure_logs:
        log_settings = settings.logging
        configure_logging(log_settings.level, log_settings.json_output)

    clock = Clock(
        anchor=clock_settings.anchor,
        date_format=clock_settings.date_format,
        locale=clock_settings.locale,
    )

    default_persona = settings.app.default_persona
    known_ids = {persona.id for persona in DEFAULT_PERSONAS}
    if default_persona not in known_ids:
        logger.warning(
            "unknown_default_persona",
            persona_id=default_persona,
            fallback=DEFAULT_PERSONAS[0].id,
        )
    registry = PersonaRegistry(
        DEFAULT_PERSONAS,
        default_id=default_persona if default_persona in known_ids else None,
    )

    audit_logger = StoreAuditLogger()
    data_manager = DataManager(
        fixture_loader=JsonFixtureLoader(storage_settings.fixtures_dir),
        override_storage=override_storage or JsonFileOverrideStorage(storage_settings.overrides_dir),
        registry=registry,
        audit_logger=audit_logger,
    )

    return AppComponents(
        clock=clock,
        data_manager=data_manager,
        queries=DerivedQueries(data_manager, clock),
        audit_logger=audit_logger,
    )

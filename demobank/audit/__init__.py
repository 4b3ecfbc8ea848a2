"""Store event logging package."""

from demobank.audit.logger import StoreAuditLogger, StoreObserver, configure_logging

__all__ = ["StoreAuditLogger", "StoreObserver", "configure_logging"]

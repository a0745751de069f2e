"""
Audit trail for store writes.

Every account, transaction, budget and goal write, every rejected draft
and every failed write ends up here, together with reset, backup, restore
and export. Events go to the structured log and, when an audit store is
configured, to the audit_events table. Losing an audit row never fails the
write it describes.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from simple_budget.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from simple_budget.models.drafts import ValidationResult
from simple_budget.services.storage import AuditStorageInterface


# JSON lines on the stdlib logging handlers
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """Writes audit events to structlog and, optionally, to an audit store."""

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        self._storage = storage
        self._logger = structlog.get_logger("simple_budget.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Emit one event at the level matching its severity, then persist it.

        Returns False only when the audit store rejected the event.
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_entity_written(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a create, update or delete of one record."""
        self.log(AuditEventBuilder.entity_written(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_batch_deleted(
        self,
        entity_type: str,
        deleted_count: int,
        criteria: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.batch_deleted(
            entity_type=entity_type,
            deleted_count=deleted_count,
            criteria=criteria,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        result: ValidationResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Record the issues of a rejected draft."""
        self.log(AuditEventBuilder.validation_failed(
            entity_type=result.entity_type,
            issues=[issue.model_dump() for issue in result.issues],
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        entity_type: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            entity_type=entity_type,
            error_message=error_message,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_maintenance(
        self,
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log reset, seeding, backup, restore or export."""
        self.log(AuditEventBuilder.maintenance(
            event_type=event_type,
            description=description,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """Id shared by every event of one multi-step action, such as a store reset."""
    return uuid4()

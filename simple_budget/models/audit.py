"""
Audit Models for SimpleBudget

Every write to the store is logged for audit purposes.
This provides:
1. A history of what changed and when
2. Debugging information when a write fails
3. A record of destructive maintenance (reset, restore)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
and a store reset leaves them in place.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """What happened to the store."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    DEFAULT_ACCOUNTS_SEEDED = "default_accounts_seeded"

    # Transactions
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_BATCH_DELETED = "transactions_batch_deleted"

    # Planning
    BUDGET_SAVED = "budget_saved"
    BUDGET_DELETED = "budget_deleted"
    GOAL_CREATED = "goal_created"
    GOAL_AMOUNT_UPDATED = "goal_amount_updated"
    GOAL_DELETED = "goal_deleted"

    # Validation / persistence
    VALIDATION_FAILED = "validation_failed"
    SAVE_FAILED = "save_failed"

    # Maintenance
    STORE_RESET = "store_reset"
    BACKUP_CREATED = "backup_created"
    BACKUP_RESTORED = "backup_restored"
    TRANSACTIONS_EXPORTED = "transactions_exported"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """One row of the audit trail."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Audit row id"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="What happened"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Log level the event is routed to"
    )

    # Subject
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction', 'budget')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="Id of the account, transaction, budget or goal written"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all writes of one reset)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Short sentence shown in the activity log"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Amounts, counts or file names relevant to the event"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="False for failures raised by the store itself"
    )

    def to_log_dict(self) -> dict:
        """Keyword arguments for the structlog call."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> tuple:
        """
        Convert to a row for the audit_events table.

        Columns in order:
        (event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action)
        """
        return (
            str(self.event_id),
            self.timestamp.isoformat(timespec="microseconds"),
            self.event_type.value,
            self.severity.value,
            self.entity_type,
            str(self.entity_id) if self.entity_id else None,
            str(self.correlation_id) if self.correlation_id else None,
            self.description,
            json.dumps(self.details, default=str) if self.details else None,
            self.error_message,
            int(self.is_user_action),
        )


class AuditEventBuilder:
    """
    Factories for the events the flows emit.

    Usage:
        event = AuditEventBuilder.entity_written(AuditEventType.ACCOUNT_CREATED, "account", account.id, ...)
        event = AuditEventBuilder.save_failed("budget", str(error), correlation_id=correlation_id)
    """

    @staticmethod
    def entity_written(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def batch_deleted(
        entity_type: str,
        deleted_count: int,
        criteria: dict,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_BATCH_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Batch deleted {deleted_count} {entity_type} record(s)",
            details={
                "deleted_count": deleted_count,
                "criteria": criteria,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Failed to write {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def maintenance(
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type in (AuditEventType.STORE_RESET, AuditEventType.BACKUP_RESTORED)
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            entity_type="store",
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

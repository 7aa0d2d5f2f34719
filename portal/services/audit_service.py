"""Audit service for lifecycle operations"""

from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.models.audit_log import AuditDataInfluence, AuditLog
from portal.services.ports import AuditRecorder


class OpType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RPC = "RPC"


class AuditService(AuditRecorder):
    """Service for audit logging"""

    async def log_operation(
        self,
        db: AsyncSession,
        op_type: str,
        op_name: str,
        operator: str,
        target_id: str | None = None,
        description: str | None = None,
        event_data: dict | None = None,
    ) -> AuditLog:
        """
        Log an audited operation

        Args:
            db: Database session
            op_type: Operation type (CREATE, UPDATE, DELETE, RPC)
            op_name: Operation name (App.create, App.delete, etc.)
            operator: User performing the operation
            target_id: Business key of the affected entity
            description: Free text description
            event_data: Additional operation data

        Returns:
            Created AuditLog record
        """
        audit_log = AuditLog(
            op_type=str(op_type.value if isinstance(op_type, OpType) else op_type),
            op_name=op_name,
            operator=operator,
            target_id=target_id,
            description=description,
            event_data=event_data,
        )
        db.add(audit_log)
        await db.flush()

        logger.info(
            f"Audit: {op_name} by {operator}",
            extra={
                "op_type": audit_log.op_type,
                "op_name": op_name,
                "operator": operator,
                "target_id": target_id,
            },
        )

        return audit_log

    async def append_data_influences(
        self, db: AsyncSession, entities: list, entity_name: str
    ) -> list[AuditDataInfluence]:
        """
        Record the prior state of removed entities, one row per audited field.

        Entities are expected to expose ``AUDITED_FIELDS`` and ``app_id``;
        the new value of every field is empty since the entity is gone.
        """
        influences = []
        for entity in entities:
            entity_id = str(getattr(entity, "app_id"))
            for field_name in getattr(entity, "AUDITED_FIELDS", ()):
                old_value = getattr(entity, field_name, None)
                influence = AuditDataInfluence(
                    entity_name=entity_name,
                    entity_id=entity_id,
                    field_name=field_name,
                    field_old_value=None if old_value is None else str(old_value),
                    field_new_value=None,
                )
                db.add(influence)
                influences.append(influence)
        await db.flush()

        logger.debug(f"Appended {len(influences)} data influences for {entity_name}")
        return influences

    async def find_data_influences(
        self, db: AsyncSession, entity_name: str, entity_id: str
    ) -> list[AuditDataInfluence]:
        result = await db.execute(
            select(AuditDataInfluence).where(
                AuditDataInfluence.entity_name == entity_name,
                AuditDataInfluence.entity_id == entity_id,
            )
        )
        return list(result.scalars().all())

    async def find_logs_by_op_name(self, db: AsyncSession, op_name: str) -> list[AuditLog]:
        result = await db.execute(
            select(AuditLog).where(AuditLog.op_name == op_name).order_by(AuditLog.created_at)
        )
        return list(result.scalars().all())


# Global instance
audit_service = AuditService()

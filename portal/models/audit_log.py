"""Audit log models"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal.models.database import Base


class AuditLog(Base):
    """Operation audit entry (App.create, App.update, App.delete, ...)"""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    op_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Operation type: CREATE, UPDATE, DELETE, RPC",
    )
    op_name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        index=True,
        comment="Operation name, e.g. App.create",
    )
    operator: Mapped[str] = mapped_column(String(64), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_data: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional operation data in JSON format",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, op_name={self.op_name}, operator={self.operator})>"


class AuditDataInfluence(Base):
    """Field-level record of an entity changed or removed by an operation"""

    __tablename__ = "audit_data_influences"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    entity_name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    field_name: Mapped[str] = mapped_column(String(50), nullable=False)
    field_old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_new_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditDataInfluence(entity={self.entity_name}:{self.entity_id}, "
            f"field={self.field_name})>"
        )

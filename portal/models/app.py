"""App model"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from portal.models.database import Base


class App(Base):
    """Application record, the root of every dependent portal entity"""

    __tablename__ = "apps"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Business key. One row per app id, tombstones included.
    app_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )

    # Descriptive fields
    name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    org_id: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    org_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    # Owner (email is derived from the identity lookup)
    owner_name: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        index=True,
    )
    owner_email: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Operator stamps
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_modified_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    deleted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<App(id={self.id}, app_id={self.app_id}, owner={self.owner_name})>"

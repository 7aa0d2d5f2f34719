"""App namespace model"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from portal.models.database import Base


class AppNamespace(Base):
    """Namespace definition owned by an app"""

    __tablename__ = "app_namespaces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    app_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(32), nullable=False)
    format: Mapped[str] = mapped_column(String(32), nullable=False, default="properties")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    comment: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_modified_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_app_namespace_app_name", "app_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<AppNamespace(app_id={self.app_id}, name={self.name}, deleted={self.is_deleted})>"

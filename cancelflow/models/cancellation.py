from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import String, DateTime, Boolean, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cancelflow.models.base import Base


def _new_id() -> str:
    return str(uuid4())


class Cancellation(Base):
    __tablename__ = "cancellations"
    __table_args__ = (
        CheckConstraint("downsell_variant IN ('A', 'B')", name="downsell_variant"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    # one record per user; insert conflicts fall back to the existing row
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    subscription_id: Mapped[str] = mapped_column(String(100), nullable=False)

    downsell_variant: Mapped[str] = mapped_column(String(1), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    accepted_downsell: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Cancellation id={self.id} user={self.user_id} "
            f"variant={self.downsell_variant} accepted={self.accepted_downsell}>"
        )

"""Report model for recorded loss incidents."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from loss_reports.database import Base


class Report(Base):
    """One loss incident submitted from the web form."""

    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("request_identity", name="uq_reports_request_identity"),
        CheckConstraint("amount > 0", name="ck_reports_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_identity: Mapped[str] = mapped_column(String(128), nullable=False)
    manager: Mapped[str] = mapped_column(Text, nullable=False)
    restaurant: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    start: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    end: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Epoch milliseconds, assigned once at insertion.
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    def __repr__(self):
        return (
            f"<Report(id={self.id}, restaurant='{self.restaurant}', amount={self.amount})>"
        )

"""Saved CNV assessment model.

One row per CNV call holding the serialized assessment plus denormalized
score columns for querying. The JSON payload is authoritative; the score
columns are recomputed from it on every save.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class SavedAssessment(Base):
    """Durable copy of a reviewer-saved CNV pathogenicity assessment."""

    __tablename__ = "saved_assessments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    cnv_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    cnv_type: Mapped[str] = mapped_column(String(20), nullable=False)

    # Serialized assessment (criteria, score result, provenance)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    # Denormalized from payload
    total_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    classification: Mapped[str] = mapped_column(String(32), nullable=False)
    is_user_modified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_saved_assessments_classification", "classification"),
    )

    def __repr__(self) -> str:
        return (
            f"<SavedAssessment(cnv_id={self.cnv_id}, "
            f"classification={self.classification}, total={self.total_score})>"
        )

"""Per-admin rubric evaluation of an idea."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class IdeaScore(Base):
    __tablename__ = "idea_scores"
    __table_args__ = (
        UniqueConstraint("idea_id", "admin_id", name="uq_idea_scores_idea_admin"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    idea_id: Mapped[int] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    admin_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ── Rubric (0–10 each) ──
    innovation: Mapped[int] = mapped_column(Integer, default=0)
    ai_integration: Mapped[int] = mapped_column(Integer, default=0)
    design_ux: Mapped[int] = mapped_column(Integer, default=0)
    problem_solving: Mapped[int] = mapped_column(Integer, default=0)
    code_quality: Mapped[int] = mapped_column(Integer, default=0)
    performance: Mapped[int] = mapped_column(Integer, default=0)
    scalability: Mapped[int] = mapped_column(Integer, default=0)
    documentation: Mapped[int] = mapped_column(Integer, default=0)
    presentation: Mapped[int] = mapped_column(Integer, default=0)
    completeness: Mapped[int] = mapped_column(Integer, default=0)

    # Sum of the ten categories, never edited on its own.
    score: Mapped[int] = mapped_column(Integer, default=0)
    comment: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    admin: Mapped["User"] = relationship("User", lazy="selectin")  # noqa: F821

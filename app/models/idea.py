"""Idea model — a submitted hackathon project and its lifecycle state."""

import enum
import json
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class IdeaStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ── Pitch ──
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(150), nullable=False)
    problem_statement: Mapped[str] = mapped_column(Text, nullable=False)
    solution: Mapped[str] = mapped_column(Text, nullable=False)
    target_audience: Mapped[Optional[str]] = mapped_column(Text, default="")
    expected_outcome: Mapped[Optional[str]] = mapped_column(Text, default="")
    timeline: Mapped[Optional[str]] = mapped_column(String(300), default="")
    resources: Mapped[Optional[str]] = mapped_column(Text, default="")

    # ── JSON lists (stored as Text for SQLite compat) ──
    tech_stack_json: Mapped[Optional[str]] = mapped_column(Text, default="[]")
    attachments_json: Mapped[Optional[str]] = mapped_column(Text, default="[]")

    # ── Lifecycle ──
    status: Mapped[IdeaStatus] = mapped_column(
        Enum(IdeaStatus), default=IdeaStatus.PENDING, index=True
    )
    progress: Mapped[int] = mapped_column(Integer, default=0)

    # ── Review ──
    score: Mapped[Optional[float]] = mapped_column(Float)
    feedback: Mapped[Optional[str]] = mapped_column(Text)

    # ── Evidence links ──
    github_url: Mapped[Optional[str]] = mapped_column(String(500))
    demo_url: Mapped[Optional[str]] = mapped_column(String(500))
    documentation_url: Mapped[Optional[str]] = mapped_column(String(500))
    video_url: Mapped[Optional[str]] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship("User", back_populates="ideas", lazy="selectin")  # noqa: F821

    # ── JSON helpers ──
    @property
    def tech_stack(self) -> List[str]:
        try:
            return json.loads(self.tech_stack_json or "[]")
        except (json.JSONDecodeError, TypeError):
            return []

    @tech_stack.setter
    def tech_stack(self, value: Optional[List[str]]) -> None:
        self.tech_stack_json = json.dumps(list(value or []))

    @property
    def attachments(self) -> List[str]:
        try:
            return json.loads(self.attachments_json or "[]")
        except (json.JSONDecodeError, TypeError):
            return []

    @attachments.setter
    def attachments(self, value: Optional[List[str]]) -> None:
        self.attachments_json = json.dumps(list(value or []))

    @property
    def evidence_links(self) -> Dict[str, Optional[str]]:
        return {
            "github_url": self.github_url,
            "demo_url": self.demo_url,
            "documentation_url": self.documentation_url,
            "video_url": self.video_url,
        }

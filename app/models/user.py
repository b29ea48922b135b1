"""User model — hackathon participants and administrators."""

import enum
import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    # ── Identity ──
    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.USER)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # ── Email verification ──
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    otp: Mapped[Optional[str]] = mapped_column(String(10))
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # ── Organisation info ──
    employee_id: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, index=True
    )
    department: Mapped[Optional[str]] = mapped_column(String(150))
    position: Mapped[Optional[str]] = mapped_column(String(150))

    # ── Profile ──
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500))
    skills_json: Mapped[Optional[str]] = mapped_column(Text, default="[]")

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relationships ──
    ideas: Mapped[List["Idea"]] = relationship(  # noqa: F821
        "Idea", back_populates="user", cascade="all, delete-orphan"
    )

    # ── JSON helper ──
    @property
    def skills(self) -> List[str]:
        try:
            return json.loads(self.skills_json or "[]")
        except (json.JSONDecodeError, TypeError):
            return []

    @skills.setter
    def skills(self, value: Optional[List[str]]) -> None:
        self.skills_json = json.dumps(list(value or []))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

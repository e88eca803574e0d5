# medmitra_portal/models.py
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, Text, UniqueConstraint
from datetime import datetime
import enum
from .database import Base, utcnow

class Portal(str, enum.Enum):
    doctor = "doctor"
    coordinator = "coordinator"
    patient = "patient"
    admin = "admin"

    @property
    def login_path(self) -> str:
        return f"/{self.value}/login"

class PortalSession(Base):
    """Token store for one signed-in portal user (what the browser kept in localStorage)."""
    __tablename__ = "portal_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    portal: Mapped[Portal] = mapped_column(Enum(Portal, name="portal"), nullable=False, index=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    user_json: Mapped[str] = mapped_column(Text, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True)

    drafts = relationship(
        "EncounterDraft",
        back_populates="session",
        cascade="all, delete-orphan",
    )

class EncounterDraft(Base):
    __tablename__ = "encounter_drafts"
    __table_args__ = (
        UniqueConstraint("session_id", "encounter_id", name="uq_drafts_session_encounter"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    session_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("portal_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    encounter_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    payload: Mapped[str] = mapped_column(Text, default="{}")
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    session = relationship("PortalSession", back_populates="drafts")

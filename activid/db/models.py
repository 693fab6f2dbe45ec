from __future__ import annotations

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

class Base(DeclarativeBase):
    pass

def _uuid() -> str:
    return str(uuid.uuid4())

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Wish(Base):
    __tablename__ = "wishes"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    invitation_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    name_key: Mapped[str] = mapped_column(String(120), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

class WishLock(Base):
    __tablename__ = "wish_locks"
    # "<invitation_id>_<name_key>": one wish per guest per invitation
    id: Mapped[str] = mapped_column(String(400), primary_key=True)
    invitation_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(120), nullable=False)
    wish_id: Mapped[str] = mapped_column(String(36), ForeignKey("wishes.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

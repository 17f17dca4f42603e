from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, JSON
from .authz import Base, new_id, utcnow


class ExtensionSetting(Base):
    """Key/value configuration pushed to the browser extension; ``value`` is any JSON document."""
    __tablename__ = 'extension_settings'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    key: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

__all__ = ["ExtensionSetting"]

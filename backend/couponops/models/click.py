from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, JSON, ForeignKey
from .authz import Base, new_id, utcnow


class Click(Base):
    # Written by the tracking pipeline; the admin API only reads it
    __tablename__ = 'clicks'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey('merchants.id', ondelete='CASCADE'), nullable=False, index=True)
    coupon_id: Mapped[Optional[str]] = mapped_column(ForeignKey('coupons.id', ondelete='SET NULL'), nullable=True, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    device_info: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    referrer: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

__all__ = ["Click"]

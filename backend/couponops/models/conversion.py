from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Float, DateTime, JSON, ForeignKey
from .authz import Base, new_id, utcnow


class Conversion(Base):
    __tablename__ = 'conversions'
    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_PAID = 'PAID'
    ALL_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_REJECTED, STATUS_PAID)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    merchant_id: Mapped[str] = mapped_column(ForeignKey('merchants.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    coupon_id: Mapped[Optional[str]] = mapped_column(ForeignKey('coupons.id', ondelete='SET NULL'), nullable=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    commission: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    transaction_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Stamped by the status machine on first entry into CONFIRMED / PAID; never cleared
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    meta: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

__all__ = ["Conversion"]

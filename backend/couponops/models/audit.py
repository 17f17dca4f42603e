from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, JSON, DateTime, event

from .authz import Base, new_id, utcnow  # reuse same metadata


class AuditLogImmutableError(RuntimeError):
    pass


class AuditLog(Base):
    __tablename__ = 'audit_logs'
    ACTION_CREATE = 'CREATE'
    ACTION_UPDATE = 'UPDATE'
    ACTION_DELETE = 'DELETE'
    ALL_ACTIONS = (ACTION_CREATE, ACTION_UPDATE, ACTION_DELETE)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # NULL actor marks a system-initiated action
    admin_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    before: Mapped[Optional[dict]] = mapped_column(JSON(none_as_null=True), nullable=True)
    after: Mapped[Optional[dict]] = mapped_column(JSON(none_as_null=True), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)


@event.listens_for(AuditLog, 'before_update')
def _reject_update(mapper, connection, target):
    raise AuditLogImmutableError(f'audit log {target.id} is append-only')


@event.listens_for(AuditLog, 'before_delete')
def _reject_delete(mapper, connection, target):
    raise AuditLogImmutableError(f'audit log {target.id} is append-only')

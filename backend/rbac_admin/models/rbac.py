from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, DateTime, Text, func
from typing import Optional, List

Base = declarative_base()


class TimestampMixin:
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# --- Core Models ---
class Permission(TimestampMixin, Base):
    __tablename__ = 'permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, default='')
    # Deleting a permission pulls it out of every role in the same transaction
    role_links = relationship('RolePermission', back_populates='permission', cascade='all, delete-orphan')


class Role(TimestampMixin, Base):
    __tablename__ = 'roles'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, default='')
    role_permissions = relationship('RolePermission', back_populates='role', cascade='all, delete-orphan', lazy='selectin')
    users = relationship('User', back_populates='role')

    @property
    def permissions(self) -> List[Permission]:
        return [rp.permission for rp in self.role_permissions if rp.permission is not None]

    def permission_names(self) -> set[str]:
        return {p.name for p in self.permissions}


class RolePermission(Base):
    __tablename__ = 'role_permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_id: Mapped[int] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    permission_id: Mapped[int] = mapped_column(ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False)

    role = relationship('Role', back_populates='role_permissions')
    permission = relationship('Permission', back_populates='role_links', lazy='joined')

    __table_args__ = (UniqueConstraint('role_id', 'permission_id', name='uq_role_permission'),)


class User(TimestampMixin, Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False, default='other')
    role_id: Mapped[Optional[int]] = mapped_column(ForeignKey('roles.id', ondelete='SET NULL'), nullable=True, index=True)
    role = relationship('Role', back_populates='users')

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)

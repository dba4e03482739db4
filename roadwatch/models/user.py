"""
User Model - reporters, operators and admins
"""
from enum import Enum

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from roadwatch.db.base import Base, TimestampMixin


class UserRole(str, Enum):
    USER = "user"
    OPERATOR = "operator"
    ADMIN = "admin"


# Roles allowed to mutate incident status, parties, services and media
OPERATOR_ROLES = frozenset({UserRole.OPERATOR, UserRole.ADMIN})


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=True, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=True)
    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)

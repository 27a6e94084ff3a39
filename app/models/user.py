"""User model."""

import enum
import uuid

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, value_enum


class UserRole(enum.Enum):
    STUDENT = "student"
    DEPARTMENT = "department"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = "users"

    # The id is the subject of the identity provider's token; we never mint
    # users ourselves outside of the maintenance scripts.
    fullname: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[UserRole] = mapped_column(
        value_enum(UserRole, "user_role"),
        nullable=False,
        default=UserRole.STUDENT,
    )
    department_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        comment="Scopes admin and department accounts; unused for students.",
    )
    roll_number: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        index=True,
        comment="Structured student identifier, e.g. 2K21-IT-1.",
    )
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role.value}')>"

"""
Authenticated actors as a closed set of role variants.

Each variant carries only what its role needs; a department actor always has a
department id, so the "department account without a department" case is
rejected once, here, instead of at every call site.
"""

import uuid
from dataclasses import dataclass
from typing import Union

from app.models.user import User, UserRole
from app.utils.exceptions import AuthenticationError, BadRequestError


@dataclass(frozen=True)
class StudentActor:
    user_id: uuid.UUID
    fullname: str
    email: str
    roll_number: str | None = None
    phone: str | None = None

    role = UserRole.STUDENT


@dataclass(frozen=True)
class DepartmentActor:
    user_id: uuid.UUID
    fullname: str
    email: str
    department_id: uuid.UUID

    role = UserRole.DEPARTMENT


@dataclass(frozen=True)
class AdminActor:
    user_id: uuid.UUID
    fullname: str
    email: str
    department_id: uuid.UUID | None = None

    role = UserRole.ADMIN

    @property
    def is_main_admin(self) -> bool:
        return self.department_id is None


Actor = Union[StudentActor, DepartmentActor, AdminActor]


def actor_from_user(user: User) -> Actor:
    if not user.is_active:
        raise AuthenticationError("User account is deactivated.")

    if user.role is UserRole.STUDENT:
        return StudentActor(
            user_id=user.id,
            fullname=user.fullname,
            email=user.email,
            roll_number=user.roll_number,
            phone=user.phone,
        )
    if user.role is UserRole.DEPARTMENT:
        if user.department_id is None:
            raise BadRequestError("Your account is not assigned to a department")
        return DepartmentActor(
            user_id=user.id,
            fullname=user.fullname,
            email=user.email,
            department_id=user.department_id,
        )
    if user.role is UserRole.ADMIN:
        return AdminActor(
            user_id=user.id,
            fullname=user.fullname,
            email=user.email,
            department_id=user.department_id,
        )
    raise AuthenticationError(f"Unsupported role: {user.role}")

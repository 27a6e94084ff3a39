"""Department model."""

import enum

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, value_enum


class DepartmentCategory(enum.Enum):
    """Partition of departments deciding which admin manages them."""

    MAIN = "MAIN"
    DVM = "DVM"
    CPD = "CPD"


class Department(BaseModel):
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("category", "name", name="uq_departments_category_name"),
    )

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[DepartmentCategory] = mapped_column(
        value_enum(DepartmentCategory, "department_category"),
        nullable=False,
        default=DepartmentCategory.MAIN,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name='{self.name}', category='{self.category.value}')>"

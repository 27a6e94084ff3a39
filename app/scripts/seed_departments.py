"""
Seed the DVM and CPD reference departments, their sub-departments and their admins.

Idempotent: existing rows are updated in place, missing ones are created.

    python -m app.scripts.seed_departments [--print-tokens]
"""

import argparse
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import SessionLocal, engine
from app.models import Department, DepartmentCategory, User, UserRole
from app.utils.jwt_manager import create_access_token
from app.utils.logging_config import logger

SUB_DEPARTMENTS: dict[DepartmentCategory, list[tuple[str, str]]] = {
    DepartmentCategory.DVM: [
        ("Veterinary Medicine", "General veterinary medicine and surgery"),
        ("Animal Sciences", "Animal nutrition, breeding, genetics"),
        ("Poultry Science", "Poultry production and health"),
        ("Livestock Management", "Farm animal management"),
        ("Clinical Sciences", "Veterinary clinics and hospitals"),
        ("Pathology Lab", "Disease diagnosis and lab services"),
        ("DVM Examination", "DVM exam schedules and results"),
        ("DVM Administration", "DVM administrative matters"),
    ],
    DepartmentCategory.CPD: [
        ("Career Counseling", "Career guidance and counseling services"),
        ("Internship Cell", "Internship placements and coordination"),
        ("Job Placement", "Job opportunities and recruitment"),
        ("Professional Training", "Workshops, certifications, skill development"),
        ("Industry Liaison", "Corporate relations and partnerships"),
        ("Alumni Relations", "Alumni network and events"),
        ("Entrepreneurship Cell", "Startup support and incubation"),
        ("CPT Programs", "Curricular Practical Training programs"),
    ],
}

ADMINS: dict[DepartmentCategory, tuple[str, str]] = {
    DepartmentCategory.DVM: ("DVM Admin", "dvm@unidesk.com"),
    DepartmentCategory.CPD: ("CPD Admin", "cpd@unidesk.com"),
}


async def ensure_department(
    session: AsyncSession,
    name: str,
    category: DepartmentCategory,
    description: str = "",
) -> Department:
    result = await session.execute(
        select(Department).where(Department.name == name, Department.category == category)
    )
    department = result.scalars().first()
    if department is None:
        department = Department(name=name, category=category, description=description)
        session.add(department)
        logger.info(f"Created department {name} ({category.value})")
    else:
        department.is_active = True
        if description:
            department.description = description
    await session.flush()
    return department


async def ensure_admin(
    session: AsyncSession, fullname: str, email: str, department: Department
) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user is None:
        user = User(fullname=fullname, email=email)
        session.add(user)
        logger.info(f"Created admin {email}")
    user.role = UserRole.ADMIN
    user.department_id = department.id
    user.is_active = True
    await session.flush()
    return user


async def seed(print_tokens: bool = False) -> None:
    async with SessionLocal() as session:
        admins: list[User] = []
        for category, sub_departments in SUB_DEPARTMENTS.items():
            reference = await ensure_department(session, category.value, category)
            for name, description in sub_departments:
                await ensure_department(session, name, category, description)
            fullname, email = ADMINS[category]
            admins.append(await ensure_admin(session, fullname, email, reference))
        await session.commit()

        for admin in admins:
            logger.info(f"{admin.email} scoped to department {admin.department_id}")
            if print_tokens:
                print(f"{admin.email}: {create_access_token(admin.id, admin.role.value)}")
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--print-tokens",
        action="store_true",
        help="Print a short-lived access token for each seeded admin.",
    )
    args = parser.parse_args()
    asyncio.run(seed(print_tokens=args.print_tokens))


if __name__ == "__main__":
    main()

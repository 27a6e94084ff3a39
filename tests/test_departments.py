import uuid

import pytest

from app.models import DepartmentCategory, UserRole
from app.services import departments as department_service
from app.utils.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_dvm_admin_manages_dvm_category_only(
    db_session, make_department, make_user, actor_of
):
    dvm = await make_department("DVM", DepartmentCategory.DVM)
    library = await make_department("Library")
    dvm_admin = actor_of(await make_user(UserRole.ADMIN, department=dvm))

    with pytest.raises(AuthorizationError):
        await department_service.get_department(db_session, dvm_admin, library.id)
    with pytest.raises(AuthorizationError):
        await department_service.update_department(
            db_session, dvm_admin, library.id, name="Central Library"
        )
    with pytest.raises(AuthorizationError):
        await department_service.deactivate_department(db_session, dvm_admin, library.id)

    listed = await department_service.list_departments(db_session, dvm_admin)
    assert [d.name for d in listed] == ["DVM"]


@pytest.mark.asyncio
async def test_created_department_inherits_admin_category(
    db_session, make_department, make_user, actor_of
):
    cpd = await make_department("CPD", DepartmentCategory.CPD)
    cpd_admin = actor_of(await make_user(UserRole.ADMIN, department=cpd))
    main_admin = actor_of(await make_user(UserRole.ADMIN))

    created = await department_service.create_department(
        db_session, cpd_admin, "  Internship Cell ", "Placements"
    )
    assert created.name == "Internship Cell"
    assert created.category is DepartmentCategory.CPD

    main = await department_service.create_department(db_session, main_admin, "Library")
    assert main.category is DepartmentCategory.MAIN
    assert [d.name for d in await department_service.list_departments(db_session, main_admin)] == [
        "Library"
    ]


@pytest.mark.asyncio
async def test_duplicate_names_are_rejected_within_category(
    db_session, make_department, make_user, actor_of
):
    await make_department("Library")
    await make_department("Library", DepartmentCategory.DVM)
    admin = actor_of(await make_user(UserRole.ADMIN))

    with pytest.raises(ValidationError):
        await department_service.create_department(db_session, admin, "library")
    with pytest.raises(ValidationError):
        await department_service.create_department(db_session, admin, "   ")


@pytest.mark.asyncio
async def test_update_and_soft_delete(db_session, make_department, make_user, actor_of):
    library = await make_department("Library")
    await make_department("Registrar")
    admin = actor_of(await make_user(UserRole.ADMIN))

    updated = await department_service.update_department(
        db_session, admin, library.id, name=" Central Library ", description="Books"
    )
    assert (updated.name, updated.description) == ("Central Library", "Books")

    with pytest.raises(ValidationError):
        await department_service.update_department(
            db_session, admin, library.id, name="registrar"
        )

    removed = await department_service.deactivate_department(db_session, admin, library.id)
    assert removed.is_active is False
    assert [d.name for d in await department_service.list_departments(db_session, admin)] == [
        "Registrar"
    ]
    assert (await department_service.get_department(db_session, admin, library.id)).id == library.id


@pytest.mark.asyncio
async def test_department_admin_requires_admin(
    db_session, make_department, make_user, actor_of
):
    library = await make_department("Library")
    staff = actor_of(await make_user(UserRole.DEPARTMENT, department=library))
    admin = actor_of(await make_user(UserRole.ADMIN))

    with pytest.raises(AuthorizationError):
        await department_service.list_departments(db_session, staff)
    with pytest.raises(NotFoundError):
        await department_service.get_department(db_session, admin, uuid.uuid4())

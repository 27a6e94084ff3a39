"""API endpoints for department administration, scoped to the admin's category."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, get_db_session
from app.schemas.department import (
    DepartmentCreate,
    DepartmentListResponse,
    DepartmentOut,
    DepartmentUpdate,
)
from app.services import departments as department_service
from app.services.actors import Actor

router = APIRouter()


@router.get("", response_model=DepartmentListResponse)
async def list_departments(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    departments = await department_service.list_departments(db, actor)
    return DepartmentListResponse(
        departments=[DepartmentOut.model_validate(d) for d in departments],
        count=len(departments),
    )


@router.post("", status_code=201, response_model=DepartmentOut)
async def create_department(
    body: DepartmentCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """The new department inherits the category of the calling admin."""
    return await department_service.create_department(
        db, actor, body.name, body.description
    )


@router.get("/{department_id}", response_model=DepartmentOut)
async def get_department(
    department_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    return await department_service.get_department(db, actor, department_id)


@router.put("/{department_id}", response_model=DepartmentOut)
async def update_department(
    department_id: uuid.UUID,
    body: DepartmentUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    return await department_service.update_department(
        db,
        actor,
        department_id,
        name=body.name,
        description=body.description,
        is_active=body.is_active,
    )


@router.delete("/{department_id}", response_model=DepartmentOut)
async def delete_department(
    department_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
):
    return await department_service.deactivate_department(db, actor, department_id)

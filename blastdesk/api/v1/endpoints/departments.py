from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import ConflictError, DepartmentNotFoundError
from blastdesk.core.types import generate_uuid
from blastdesk.models import Department, User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.department import DepartmentCreate, DepartmentResponse, DepartmentUpdate
from blastdesk.services.activity_log_service import log_activity

router = APIRouter()


@router.get("", response_model=List[DepartmentResponse])
async def list_departments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(select(Department).order_by(Department.name))
    return result.scalars().all()


@router.post("", response_model=DepartmentResponse)
async def create_department(
    payload: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    department_id = payload.id or generate_uuid()
    if await db.get(Department, department_id):
        raise ConflictError(f"Department with ID '{department_id}' already exists", field="id")

    department = Department(id=department_id, name=payload.name.strip())
    db.add(department)
    log_activity(db, current_user.username, "Department Creation", f"Department {department.name} created")
    await db.flush()
    return department


@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    department = await db.get(Department, department_id)
    if not department:
        raise DepartmentNotFoundError(department_id)

    department.name = payload.name.strip()
    log_activity(
        db, current_user.username, "Department Update",
        f"Department {department_id} updated to {department.name}"
    )
    return department


@router.delete("/{department_id}")
async def delete_department(
    department_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    department = await db.get(Department, department_id)
    if not department:
        raise DepartmentNotFoundError(department_id)

    await db.delete(department)
    log_activity(db, current_user.username, "Department Deletion", f"Department {department_id} deleted")
    return {"deletedID": department_id}

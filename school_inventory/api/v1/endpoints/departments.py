# File: school_inventory/api/v1/endpoints/departments.py
from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from school_inventory import crud, schemas
from school_inventory.api import deps
from school_inventory.core.exceptions import ConflictError, NotFoundError
from school_inventory.db.database import get_db

router = APIRouter()


@router.get("/", response_model=List[schemas.Department])
def list_departments(
    *,
    db: Session = Depends(get_db),
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    """All departments"""
    return crud.department.get_multi(db, limit=500)


@router.post("/", response_model=schemas.Department, status_code=201)
def create_department(
    *,
    db: Session = Depends(get_db),
    department_in: schemas.DepartmentCreate,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    if crud.department.get_by_name(db, name=department_in.name):
        raise ConflictError(f"Department '{department_in.name}' already exists", name=department_in.name)
    return crud.department.create(db, obj_in=department_in)


@router.put("/{department_id}", response_model=schemas.Department)
def update_department(
    *,
    db: Session = Depends(get_db),
    department_id: int,
    department_in: schemas.DepartmentUpdate,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    department = crud.department.get(db, department_id)
    if not department:
        raise NotFoundError("Department", department_id)
    if department_in.name:
        existing = crud.department.get_by_name(db, name=department_in.name)
        if existing and existing.id != department_id:
            raise ConflictError(f"Department '{department_in.name}' already exists", name=department_in.name)
    return crud.department.update(db, db_obj=department, obj_in=department_in)


@router.delete("/{department_id}", response_model=dict)
def delete_department(
    *,
    db: Session = Depends(get_db),
    department_id: int,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    department = crud.department.get(db, department_id)
    if not department:
        raise NotFoundError("Department", department_id)
    members = crud.user.count_in_department(db, department_id=department_id)
    if members:
        raise ConflictError(
            f"Department '{department.name}' still has {members} users",
            department_id=department_id,
        )
    crud.department.remove(db, id=department_id)
    return {"message": "Department deleted successfully"}

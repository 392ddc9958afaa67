# File: school_inventory/api/v1/endpoints/users.py
import logging
from typing import Any, List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from school_inventory import crud, schemas
from school_inventory.api import deps
from school_inventory.core.exceptions import ConflictError, NotFoundError
from school_inventory.db.database import get_db
from school_inventory.models.user import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[schemas.User])
def list_users(
    *,
    db: Session = Depends(get_db),
    role: Optional[UserRole] = None,
    department_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    return crud.user.get_filtered(
        db, role=role, department_id=department_id, skip=skip, limit=limit
    )


@router.post("/", response_model=schemas.User, status_code=201)
def create_user(
    *,
    db: Session = Depends(get_db),
    user_in: schemas.UserCreate,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    if crud.user.email_taken(db, email=user_in.email):
        raise ConflictError(f"A user with email {user_in.email} already exists", email=user_in.email)
    crud.user.check_department(db, role=user_in.role, department_id=user_in.department_id)
    user = crud.user.create(db, obj_in=user_in)
    logger.info(f"User {user.id} created as {user.role.value} by admin {actor.user_id}")
    return user


@router.get("/{user_id}", response_model=schemas.User)
def get_user(
    *,
    db: Session = Depends(get_db),
    user_id: int,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    user = crud.user.get(db, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


@router.put("/{user_id}", response_model=schemas.User)
def update_user(
    *,
    db: Session = Depends(get_db),
    user_id: int,
    user_in: schemas.UserUpdate,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    """Role and department changes apply to the user's next token"""
    user = crud.user.get(db, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    if user_in.email and crud.user.email_taken(db, email=user_in.email, exclude_id=user_id):
        raise ConflictError(f"A user with email {user_in.email} already exists", email=user_in.email)
    # explicit nulls on required columns are dropped, not written
    update_data = crud.user.update_data(user_in)
    crud.user.check_department(
        db,
        role=update_data.get("role", user.role),
        department_id=update_data.get("department_id", user.department_id),
    )
    return crud.user.update(db, db_obj=user, obj_in=update_data)


@router.delete("/{user_id}", response_model=schemas.User)
def deactivate_user(
    *,
    db: Session = Depends(get_db),
    user_id: int,
    actor: schemas.Actor = Depends(deps.require_admin)
) -> Any:
    """Deactivate a user; their requests and ledger entries are kept"""
    user = crud.user.get(db, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    if user.id == actor.user_id:
        raise ConflictError("You cannot deactivate your own account", user_id=user_id)
    user = crud.user.update(db, db_obj=user, obj_in={"is_active": False})
    logger.info(f"User {user_id} deactivated by admin {actor.user_id}")
    return user

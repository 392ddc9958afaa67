# File: school_inventory/api/v1/endpoints/auth.py
import logging
from datetime import timedelta
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from school_inventory import crud, schemas
from school_inventory.api import deps
from school_inventory.core import security
from school_inventory.core.config import settings
from school_inventory.core.exceptions import ConflictError, ForbiddenError
from school_inventory.db.database import get_db
from school_inventory.models.user import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=schemas.Token)
def login(
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """OAuth2 compatible token login, get an access token for future requests"""
    user = crud.user.authenticate(db, email=form_data.username, password=form_data.password)
    if not user:
        logger.warning(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    access_token = security.create_access_token(
        subject=user.id,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        extra_claims={"role": user.role.value, "department_id": user.department_id},
    )
    logger.info(f"User {user.id} logged in as {user.role.value}")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
        "full_name": user.full_name,
    }


@router.get("/me", response_model=schemas.User)
def read_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    """Who am I logged in as"""
    return current_user


@router.put("/me", response_model=schemas.User)
def update_me(
    *,
    db: Session = Depends(get_db),
    profile_in: schemas.ProfileUpdate,
    current_user: User = Depends(deps.get_current_user)
) -> Any:
    """Change your own name, email, phone number or password.

    A new password is only accepted together with the current one. Role and
    department stay admin-managed.
    """
    if profile_in.new_password:
        if not profile_in.current_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is required to set a new password"
            )
        if not current_user.hashed_password or not security.verify_password(
            profile_in.current_password, current_user.hashed_password
        ):
            logger.warning(f"User {current_user.id} gave a wrong current password")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Current password is incorrect"
            )

    if profile_in.email and crud.user.email_taken(db, email=profile_in.email, exclude_id=current_user.id):
        raise ConflictError(f"A user with email {profile_in.email} already exists", email=profile_in.email)

    update_data = profile_in.dict(exclude_unset=True, exclude={"current_password", "new_password"})
    if profile_in.new_password:
        update_data["password"] = profile_in.new_password
    # a single commit covers the profile fields and the password hash
    user = crud.user.update(db, db_obj=current_user, obj_in=update_data)
    logger.info(f"User {user.id} updated their profile")
    return user


@router.post("/signup", response_model=schemas.User, status_code=201)
def signup(
    *,
    db: Session = Depends(get_db),
    user_in: schemas.UserSignup
) -> Any:
    """Register a staff account in an existing department"""
    if not settings.ALLOW_SIGNUP:
        raise ForbiddenError("Self-registration is disabled")
    if crud.user.email_taken(db, email=user_in.email):
        raise ConflictError(f"A user with email {user_in.email} already exists", email=user_in.email)
    crud.user.check_department(db, role=UserRole.STAFF, department_id=user_in.department_id)
    user = crud.user.create(
        db,
        obj_in=schemas.UserCreate(**user_in.dict(), role=UserRole.STAFF),
    )
    logger.info(f"User {user.id} signed up as staff in department {user.department_id}")
    return user

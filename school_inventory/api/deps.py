# File: school_inventory/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from school_inventory import crud
from school_inventory.core.exceptions import ForbiddenError
from school_inventory.core.permissions import can_manage_inventory
from school_inventory.core.security import decode_token
from school_inventory.db.database import get_db
from school_inventory.models.user import User, UserRole
from school_inventory.schemas.auth import Actor, TokenData

security = HTTPBearer()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise credentials_exception

    token_data = TokenData(user_id=int(subject))
    user = crud.user.get(db, token_data.user_id)
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return user


def actor_from_user(user: User) -> Actor:
    return Actor(
        user_id=user.id,
        full_name=user.full_name,
        role=user.role,
        department_id=user.department_id,
        department_name=user.department_name,
    )


def get_current_actor(current_user: User = Depends(get_current_user)) -> Actor:
    """The (user, role, department) tuple every workflow call is made with."""
    return actor_from_user(current_user)


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if actor.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return actor


def require_inventory_manager(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not can_manage_inventory(actor.role):
        raise ForbiddenError("Only admins and stock managers can change inventory")
    return actor

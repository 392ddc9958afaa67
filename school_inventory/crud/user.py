# File: school_inventory/crud/user.py
from typing import Any, Dict, List, Optional, Union
from sqlalchemy import func
from sqlalchemy.orm import Session
from school_inventory.core.exceptions import ConflictError, NotFoundError
from school_inventory.crud.base import CRUDBase
from school_inventory.crud.department import department as crud_department
from school_inventory.models.user import DEPARTMENT_ROLES, User, UserRole
from school_inventory.schemas.user import UserCreate, UserUpdate
from school_inventory.core.security import get_password_hash, verify_password


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    required_fields = ("email", "full_name", "role", "is_active")

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def get_filtered(
        self,
        db: Session,
        *,
        role: Optional[UserRole] = None,
        department_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        query = db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if department_id is not None:
            query = query.filter(User.department_id == department_id)
        return query.order_by(User.full_name).offset(skip).limit(limit).all()

    def check_department(self, db: Session, *, role: UserRole, department_id: Optional[int]) -> None:
        if department_id is not None and crud_department.get(db, department_id) is None:
            raise NotFoundError("Department", department_id)
        if role in DEPARTMENT_ROLES and department_id is None:
            raise ConflictError(f"Role {role.value} requires a department", role=role.value)

    def email_taken(self, db: Session, *, email: str, exclude_id: Optional[int] = None) -> bool:
        existing = self.get_by_email(db, email=email)
        return existing is not None and existing.id != exclude_id

    def count_in_department(self, db: Session, *, department_id: int) -> int:
        return db.query(User).filter(User.department_id == department_id).count()

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        db_obj = User(
            email=obj_in.email.strip().lower(),
            full_name=obj_in.full_name,
            hashed_password=get_password_hash(obj_in.password),
            role=obj_in.role,
            department_id=obj_in.department_id,
            phone_number=obj_in.phone_number,
            is_active=True,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: User, obj_in: Union[UserUpdate, Dict[str, Any]]
    ) -> User:
        update_data = self.update_data(obj_in)
        if update_data.get("password"):
            update_data["hashed_password"] = get_password_hash(update_data.pop("password"))
        else:
            update_data.pop("password", None)
        if update_data.get("email"):
            update_data["email"] = update_data["email"].strip().lower()
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(db, email=email)
        if not user or not user.hashed_password:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user


user = CRUDUser(User)

# File: school_inventory/crud/department.py
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from school_inventory.crud.base import CRUDBase
from school_inventory.models.department import Department
from school_inventory.schemas.department import DepartmentCreate, DepartmentUpdate


class CRUDDepartment(CRUDBase[Department, DepartmentCreate, DepartmentUpdate]):
    required_fields = ("name",)

    def get_by_name(self, db: Session, *, name: str) -> Optional[Department]:
        return db.query(Department).filter(func.lower(Department.name) == name.strip().lower()).first()


department = CRUDDepartment(Department)

# File: school_inventory/models/user.py
from sqlalchemy import Column, String, Boolean, Enum, Integer, ForeignKey
from sqlalchemy.orm import relationship
from school_inventory.models.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    STAFF = "staff"
    DEPARTMENT_HEAD = "department_head"
    STOCK_MANAGER = "stock_manager"
    ADMIN = "admin"


# Roles that must be attached to a department
DEPARTMENT_ROLES = (UserRole.STAFF, UserRole.DEPARTMENT_HEAD)


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.STAFF)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    phone_number = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    department = relationship("Department", back_populates="users")

    @property
    def department_name(self):
        return self.department.name if self.department else None

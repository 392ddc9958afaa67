# File: school_inventory/schemas/user.py
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from school_inventory.models.user import UserRole


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.STAFF
    department_id: Optional[int] = None
    phone_number: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    department_id: Optional[int] = None
    phone_number: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    is_active: Optional[bool] = None


class User(UserBase):
    id: int
    is_active: bool
    department_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSignup(BaseModel):
    """Self-registration; the account is always created as staff."""
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6)
    department_id: int
    phone_number: Optional[str] = None


class ProfileUpdate(BaseModel):
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=6)

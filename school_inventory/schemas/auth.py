# File: school_inventory/schemas/auth.py
from typing import Optional
from pydantic import BaseModel
from school_inventory.models.user import UserRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole
    full_name: str


class TokenData(BaseModel):
    user_id: Optional[int] = None


class Actor(BaseModel):
    """Identity of the caller as supplied by authentication.

    The lifecycle engine trusts this tuple as given and does not re-derive it.
    """
    user_id: int
    full_name: str
    role: UserRole
    department_id: Optional[int] = None
    department_name: Optional[str] = None

    class Config:
        frozen = True

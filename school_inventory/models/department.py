# File: school_inventory/models/department.py
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship
from school_inventory.models.base import BaseModel


class Department(BaseModel):
    __tablename__ = "departments"

    name = Column(String(150), unique=True, nullable=False, index=True)
    description = Column(Text)

    users = relationship("User", back_populates="department")

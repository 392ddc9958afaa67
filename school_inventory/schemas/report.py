# File: school_inventory/schemas/report.py
from typing import Dict, List, Optional
from pydantic import BaseModel
from school_inventory.schemas.inventory import InventoryItem


class CategoryTotal(BaseModel):
    category: str
    item_count: int
    units: int


class InventorySummary(BaseModel):
    item_count: int
    total_units: int
    by_status: Dict[str, int]
    by_category: List[CategoryTotal]
    attention: List[InventoryItem]  # low and out of stock items


class DepartmentRequestTotal(BaseModel):
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    request_count: int
    units_requested: int
    units_fulfilled: int


class RequestSummary(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_department: List[DepartmentRequestTotal]

# File: school_inventory/schemas/inventory.py
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from school_inventory.models.inventory import InventoryStatus
from school_inventory.models.stock_movement import MovementKind


class InventoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    location: Optional[str] = None


class InventoryCreate(InventoryBase):
    quantity: int = 0  # negative values are clamped to zero
    owner_id: Optional[int] = None


class InventoryUpdate(BaseModel):
    """Metadata only; quantity changes go through add-stock / withdraw."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = None


class StockChange(BaseModel):
    quantity: int
    notes: Optional[str] = None


class InventoryItem(InventoryBase):
    id: int
    quantity: int
    status: InventoryStatus
    owner_id: Optional[int] = None
    is_active: bool
    date_added: datetime
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockMovement(BaseModel):
    id: int
    item_id: int
    item_name: str
    kind: MovementKind
    quantity_delta: int
    quantity_after: int
    actor_id: Optional[int] = None
    actor_name: Optional[str] = None
    request_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

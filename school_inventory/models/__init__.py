from .base import BaseModel
from .department import Department
from .user import User, UserRole
from .inventory import InventoryItem, InventoryStatus, derive_status
from .item_request import ItemRequest, RequestStatus
from .stock_movement import StockMovement, MovementKind

__all__ = [
    "BaseModel", "Department", "User", "UserRole",
    "InventoryItem", "InventoryStatus", "derive_status",
    "ItemRequest", "RequestStatus", "StockMovement", "MovementKind",
]

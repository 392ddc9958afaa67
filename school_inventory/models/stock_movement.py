# File: school_inventory/models/stock_movement.py
from sqlalchemy import Column, Integer, String, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship
from school_inventory.models.base import BaseModel
import enum


class MovementKind(str, enum.Enum):
    ADD_STOCK = "add_stock"
    WITHDRAWAL = "withdrawal"
    FULFILLMENT = "fulfillment"


class StockMovement(BaseModel):
    """Append-only record of every quantity change on an inventory item."""
    __tablename__ = "stock_movements"

    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)  # name at the time of the movement
    kind = Column(Enum(MovementKind), nullable=False)
    quantity_delta = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)
    actor_id = Column(Integer, nullable=True)
    actor_name = Column(String(255))
    request_id = Column(Integer, ForeignKey("item_requests.id"), nullable=True, index=True)
    notes = Column(Text)

    item = relationship("InventoryItem")

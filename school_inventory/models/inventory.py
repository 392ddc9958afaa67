# File: school_inventory/models/inventory.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, case
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.sql import func
from school_inventory.core.config import settings
from school_inventory.models.base import BaseModel
import enum


class InventoryStatus(str, enum.Enum):
    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def derive_status(quantity: int, threshold: int = None) -> InventoryStatus:
    """Stock status is a pure function of quantity; it is never stored."""
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    if quantity <= 0:
        return InventoryStatus.OUT_OF_STOCK
    if quantity < threshold:
        return InventoryStatus.LOW_STOCK
    return InventoryStatus.AVAILABLE


class InventoryItem(BaseModel):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
    )

    name = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String(255))
    owner_id = Column(Integer, nullable=True, index=True)  # owning scope (school / store room)
    is_active = Column(Boolean, default=True, nullable=False)
    date_added = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_by = Column(String(255))

    @hybrid_property
    def status(self) -> InventoryStatus:
        return derive_status(self.quantity or 0)

    @status.expression
    def status(cls):
        return case(
            (cls.quantity <= 0, InventoryStatus.OUT_OF_STOCK.value),
            (cls.quantity < settings.LOW_STOCK_THRESHOLD, InventoryStatus.LOW_STOCK.value),
            else_=InventoryStatus.AVAILABLE.value,
        )

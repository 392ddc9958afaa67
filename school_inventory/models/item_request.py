# File: school_inventory/models/item_request.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from school_inventory.models.base import BaseModel
import enum


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    DEPARTMENT_APPROVED = "department_approved"
    APPROVED = "approved"
    REJECTED = "rejected"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class ItemRequest(BaseModel):
    __tablename__ = "item_requests"
    __table_args__ = (
        CheckConstraint("requested_quantity > 0", name="ck_item_requests_requested_positive"),
        CheckConstraint(
            "fulfilled_quantity >= 0 AND fulfilled_quantity <= requested_quantity",
            name="ck_item_requests_fulfilled_bounds",
        ),
    )

    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)  # snapshot at request time
    requested_quantity = Column(Integer, nullable=False)
    fulfilled_quantity = Column(Integer, nullable=False, default=0)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING, index=True)

    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    requester_name = Column(String(255), nullable=False)
    requester_department_id = Column(Integer, nullable=True, index=True)
    requester_department_name = Column(String(150))

    # First approval-type response (department approval, approval or rejection)
    approver_id = Column(Integer, nullable=True)
    approver_name = Column(String(255))
    approver_role = Column(String(50))

    fulfilled_by_id = Column(Integer, nullable=True)
    fulfilled_by_name = Column(String(255))
    fulfilled_by_role = Column(String(50))

    rejection_reason = Column(Text)
    notes = Column(Text)
    admin_notes = Column(Text)

    request_date = Column(DateTime(timezone=True), nullable=False)
    response_date = Column(DateTime(timezone=True))

    item = relationship("InventoryItem")

    @property
    def remaining_quantity(self) -> int:
        return self.requested_quantity - (self.fulfilled_quantity or 0)

# File: school_inventory/schemas/item_request.py
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from school_inventory.models.item_request import RequestStatus


class RequestAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FULFILL = "fulfill"
    CANCEL = "cancel"


class RequestScope(str, Enum):
    MINE = "mine"
    ALL = "all"


class ItemRequestCreate(BaseModel):
    item_id: int
    # Range is checked by the lifecycle engine so it can answer InvalidQuantity
    requested_quantity: int
    notes: Optional[str] = None


class ItemRequestBatch(BaseModel):
    lines: List[ItemRequestCreate] = Field(..., min_length=1)


class ApprovalAction(BaseModel):
    # Department heads may ask for final approval directly
    target_status: Optional[RequestStatus] = None
    admin_notes: Optional[str] = None


class RejectionAction(BaseModel):
    reason: str
    admin_notes: Optional[str] = None


class FulfillmentAction(BaseModel):
    quantity: int
    admin_notes: Optional[str] = None


class TransitionRequest(BaseModel):
    """Single entry point covering approve, reject, fulfill and cancel."""
    action: RequestAction
    target_status: Optional[RequestStatus] = None
    reason: Optional[str] = None
    quantity: Optional[int] = None
    admin_notes: Optional[str] = None


class ItemRequest(BaseModel):
    id: int
    item_id: int
    item_name: str
    requested_quantity: int
    fulfilled_quantity: int
    remaining_quantity: int
    status: RequestStatus
    requester_id: int
    requester_name: str
    requester_department_id: Optional[int] = None
    requester_department_name: Optional[str] = None
    approver_id: Optional[int] = None
    approver_name: Optional[str] = None
    approver_role: Optional[str] = None
    fulfilled_by_id: Optional[int] = None
    fulfilled_by_name: Optional[str] = None
    fulfilled_by_role: Optional[str] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    request_date: datetime
    response_date: Optional[datetime] = None

    class Config:
        from_attributes = True

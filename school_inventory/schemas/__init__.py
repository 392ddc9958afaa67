from .auth import Token, TokenData, Actor
from .department import Department, DepartmentCreate, DepartmentUpdate
from .user import User, UserCreate, UserUpdate, UserSignup, ProfileUpdate
from .inventory import InventoryItem, InventoryCreate, InventoryUpdate, StockChange, StockMovement
from .item_request import (
    ItemRequest, ItemRequestCreate, ItemRequestBatch, RequestAction, RequestScope,
    ApprovalAction, RejectionAction, FulfillmentAction, TransitionRequest,
)
from .report import InventorySummary, CategoryTotal, RequestSummary, DepartmentRequestTotal

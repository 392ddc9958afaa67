"""
Typed errors raised by the inventory store and the request lifecycle.

Every error carries a machine-readable ``code``, the HTTP ``status_code`` the
API renders it with, and structured ``context`` for the client message:

    InventoryError
    +-- NotFoundError
    |   +-- ItemNotFoundError
    +-- InvalidTransitionError
    +-- ForbiddenError
    +-- InvalidQuantityError
    +-- OverFulfillmentError
    +-- InsufficientStockError
    +-- DuplicateItemError
    +-- ConflictError
    +-- ReasonRequiredError

All of them are raised before any write is flushed, or after the surrounding
transaction has been rolled back.
"""
from typing import Any, Dict, Optional


class InventoryError(Exception):
    code: str = "INVENTORY_ERROR"
    status_code: int = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.context}


class NotFoundError(InventoryError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{entity} {entity_id} not found",
            entity=entity,
            entity_id=entity_id,
        )


class ItemNotFoundError(NotFoundError):
    code = "ITEM_NOT_FOUND"

    def __init__(self, item_id: Any):
        super().__init__("Item", item_id, f"Item {item_id} not found in inventory")


class InvalidTransitionError(InventoryError):
    code = "INVALID_TRANSITION"
    status_code = 409

    def __init__(self, request_id: Any, from_status: Any, action: str):
        from_value = getattr(from_status, "value", from_status)
        super().__init__(
            f"Cannot {action} request {request_id}: it is {from_value}",
            request_id=request_id,
            from_status=from_value,
            action=action,
        )


class ForbiddenError(InventoryError):
    code = "FORBIDDEN"
    status_code = 403


class InvalidQuantityError(InventoryError):
    code = "INVALID_QUANTITY"
    status_code = 422

    def __init__(self, quantity: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Quantity must be a positive whole number, got {quantity}",
            quantity=quantity,
        )


class OverFulfillmentError(InventoryError):
    code = "OVER_FULFILLMENT"
    status_code = 409

    def __init__(self, request_id: Any, requested: int, remaining: int):
        super().__init__(
            f"Cannot fulfill {requested} units of request {request_id}: "
            f"only {remaining} remaining",
            request_id=request_id,
            requested=requested,
            remaining=remaining,
        )


class InsufficientStockError(InventoryError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, item_id: Any, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for item {item_id}: {requested} needed, "
            f"{available} available",
            item_id=item_id,
            requested=requested,
            available=available,
        )


class DuplicateItemError(InventoryError):
    code = "DUPLICATE_ITEM"
    status_code = 409

    def __init__(self, name: str, owner_id: Any = None):
        super().__init__(
            f"An item named '{name}' already exists",
            name=name,
            owner_id=owner_id,
        )


class ConflictError(InventoryError):
    code = "CONFLICT"
    status_code = 409


class ReasonRequiredError(InventoryError):
    code = "REASON_REQUIRED"
    status_code = 422

    def __init__(self, request_id: Any):
        super().__init__(
            f"A rejection reason is required to reject request {request_id}",
            request_id=request_id,
        )

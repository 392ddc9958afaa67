# File: school_inventory/services/reporting.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from school_inventory.crud.inventory import inventory
from school_inventory.crud.item_request import item_request
from school_inventory.models.inventory import InventoryItem, InventoryStatus, derive_status
from school_inventory.models.item_request import ItemRequest, RequestStatus
from school_inventory.models.stock_movement import StockMovement
from school_inventory.schemas.auth import Actor
from school_inventory.schemas.report import (
    CategoryTotal,
    DepartmentRequestTotal,
    InventorySummary,
    RequestSummary,
)

logger = logging.getLogger(__name__)


def inventory_summary(db: Session) -> InventorySummary:
    """Stock totals over active items, grouped by derived status and category."""
    active = db.query(InventoryItem).filter(InventoryItem.is_active == True)

    by_status = {status.value: 0 for status in InventoryStatus}
    for quantity, count in (
        active.with_entities(InventoryItem.quantity, func.count(InventoryItem.id))
        .group_by(InventoryItem.quantity)
        .all()
    ):
        by_status[derive_status(quantity).value] += count

    by_category = [
        CategoryTotal(category=category, item_count=count, units=units or 0)
        for category, count, units in (
            active.with_entities(
                InventoryItem.category,
                func.count(InventoryItem.id),
                func.sum(InventoryItem.quantity),
            )
            .group_by(InventoryItem.category)
            .order_by(InventoryItem.category)
            .all()
        )
    ]

    attention = (
        active.filter(InventoryItem.status != InventoryStatus.AVAILABLE.value)
        .order_by(InventoryItem.quantity, InventoryItem.name)
        .all()
    )

    return InventorySummary(
        item_count=sum(row.item_count for row in by_category),
        total_units=sum(row.units for row in by_category),
        by_status=by_status,
        by_category=by_category,
        attention=attention,
    )


def request_summary(db: Session, *, actor: Actor) -> RequestSummary:
    """Request counts for what ``actor`` is allowed to see."""
    visible = item_request.visible_query(db, actor=actor)

    by_status = {status.value: 0 for status in RequestStatus}
    for status, count in (
        visible.with_entities(ItemRequest.status, func.count(ItemRequest.id))
        .group_by(ItemRequest.status)
        .all()
    ):
        by_status[status.value] = count

    by_department = [
        DepartmentRequestTotal(
            department_id=department_id,
            department_name=department_name,
            request_count=count,
            units_requested=requested or 0,
            units_fulfilled=fulfilled or 0,
        )
        for department_id, department_name, count, requested, fulfilled in (
            visible.with_entities(
                ItemRequest.requester_department_id,
                ItemRequest.requester_department_name,
                func.count(ItemRequest.id),
                func.sum(ItemRequest.requested_quantity),
                func.sum(ItemRequest.fulfilled_quantity),
            )
            .group_by(ItemRequest.requester_department_id, ItemRequest.requester_department_name)
            .order_by(ItemRequest.requester_department_name)
            .all()
        )
    ]

    return RequestSummary(
        total=sum(by_status.values()),
        by_status=by_status,
        by_department=by_department,
    )


def movement_history(
    db: Session, *, since: Optional[datetime] = None, limit: int = 200
) -> List[StockMovement]:
    return inventory.get_movements(db, since=since, limit=limit)

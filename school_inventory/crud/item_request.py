# File: school_inventory/crud/item_request.py
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from school_inventory.core.exceptions import ConflictError
from school_inventory.core.permissions import can_view_all_requests
from school_inventory.crud.base import CRUDBase
from school_inventory.models.inventory import InventoryItem
from school_inventory.models.item_request import ItemRequest, RequestStatus
from school_inventory.models.user import UserRole
from school_inventory.schemas.auth import Actor
from school_inventory.schemas.item_request import ItemRequestCreate, RequestScope


class CRUDItemRequest(CRUDBase[ItemRequest, ItemRequestCreate, ItemRequestCreate]):

    def get_for_update(self, db: Session, request_id: int) -> Optional[ItemRequest]:
        return (
            db.query(ItemRequest)
            .filter(ItemRequest.id == request_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def build(
        self,
        *,
        item: InventoryItem,
        actor: Actor,
        quantity: int,
        notes: Optional[str] = None,
    ) -> ItemRequest:
        """Pending row with the item and requester snapshotted; not yet added."""
        return ItemRequest(
            item_id=item.id,
            item_name=item.name,
            requested_quantity=quantity,
            fulfilled_quantity=0,
            status=RequestStatus.PENDING,
            requester_id=actor.user_id,
            requester_name=actor.full_name,
            requester_department_id=actor.department_id,
            requester_department_name=actor.department_name,
            notes=notes,
            request_date=datetime.now(timezone.utc),
        )

    def visible_query(self, db: Session, *, actor: Actor, scope: RequestScope = RequestScope.ALL):
        query = db.query(ItemRequest)
        if scope == RequestScope.MINE:
            return query.filter(ItemRequest.requester_id == actor.user_id)
        if can_view_all_requests(actor.role):
            return query
        if actor.role == UserRole.DEPARTMENT_HEAD:
            if actor.department_id is None:
                return query.filter(ItemRequest.requester_id == actor.user_id)
            return query.filter(ItemRequest.requester_department_id == actor.department_id)
        return query.filter(ItemRequest.requester_id == actor.user_id)

    def get_visible(
        self,
        db: Session,
        *,
        actor: Actor,
        scope: RequestScope = RequestScope.ALL,
        status: Optional[RequestStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ItemRequest]:
        query = self.visible_query(db, actor=actor, scope=scope)
        if status is not None:
            query = query.filter(ItemRequest.status == status)
        return (
            query.order_by(ItemRequest.request_date.desc(), ItemRequest.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def apply_fulfillment(
        self,
        db: Session,
        *,
        request: ItemRequest,
        quantity: int,
        actor: Actor,
        admin_notes: Optional[str] = None,
    ) -> ItemRequest:
        """Add ``quantity`` to the fulfilled total as a compare-and-set.

        The UPDATE only matches if ``fulfilled_quantity`` still holds the value
        the caller validated against; otherwise ConflictError is raised and the
        caller must roll back and re-read.
        """
        observed = request.fulfilled_quantity
        new_total = observed + quantity
        new_status = (
            RequestStatus.FULFILLED if new_total == request.requested_quantity else RequestStatus.APPROVED
        )
        values = {
            "fulfilled_quantity": new_total,
            "status": new_status,
            "fulfilled_by_id": actor.user_id,
            "fulfilled_by_name": actor.full_name,
            "fulfilled_by_role": actor.role.value,
            "response_date": datetime.now(timezone.utc),
        }
        if admin_notes is not None:
            values["admin_notes"] = admin_notes

        result = db.execute(
            update(ItemRequest)
            .where(
                ItemRequest.id == request.id,
                ItemRequest.fulfilled_quantity == observed,
                ItemRequest.status.in_([RequestStatus.APPROVED, RequestStatus.FULFILLED]),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(
                f"Request {request.id} changed while it was being fulfilled",
                request_id=request.id,
            )
        db.flush()
        db.refresh(request)
        return request


item_request = CRUDItemRequest(ItemRequest)

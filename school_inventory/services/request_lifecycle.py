"""
Item-request lifecycle: submission, approval chain, rejection, cancellation
and stock fulfillment.

Status machine::

    Pending ──> DepartmentApproved ──> Approved ──> Fulfilled
       │               │                  │  ^          │
       │               └──> Rejected      └──┘ partial  └─> (more fulfill
       ├──> Approved                                         calls only
       ├──> Rejected                                         over-fulfill)
       └──> Cancelled (requester only)

Every transition runs in one transaction. The request row is locked first,
then the inventory row, so two fulfillments of the same item queue behind
each other and the second one re-reads committed state. Checks run in a fixed
order and all of them happen before the first write:

    input -> NotFound -> InvalidTransition -> Forbidden -> numeric limits
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from school_inventory.core.config import settings
from school_inventory.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransitionError,
    ItemNotFoundError,
    NotFoundError,
    OverFulfillmentError,
    ReasonRequiredError,
)
from school_inventory.core.permissions import (
    can_transition,
    default_approval_target,
    is_legal_transition,
)
from school_inventory.crud.inventory import inventory
from school_inventory.crud.item_request import item_request
from school_inventory.models.item_request import ItemRequest, RequestStatus
from school_inventory.models.stock_movement import MovementKind
from school_inventory.models.user import UserRole
from school_inventory.schemas.auth import Actor
from school_inventory.schemas.item_request import (
    ItemRequestCreate,
    RequestAction,
    RequestScope,
    TransitionRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

APPROVAL_TARGETS = (RequestStatus.DEPARTMENT_APPROVED, RequestStatus.APPROVED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_positive(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity)
    return quantity


class RequestLifecycle:
    """Server-side authority over item-request status and stock release."""

    def __init__(self, retries: Optional[int] = None):
        self.retries = settings.TRANSITION_RETRIES if retries is None else retries

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_request(
        self,
        db: Session,
        *,
        actor: Actor,
        item_id: int,
        quantity: int,
        notes: Optional[str] = None,
    ) -> ItemRequest:
        """Create a Pending request. Stock is not touched until fulfillment."""
        return self.submit_batch(
            db,
            actor=actor,
            lines=[ItemRequestCreate(item_id=item_id, requested_quantity=quantity, notes=notes)],
        )[0]

    def submit_batch(
        self, db: Session, *, actor: Actor, lines: Iterable[ItemRequestCreate]
    ) -> List[ItemRequest]:
        """One Pending row per line; either every line is stored or none is."""
        lines = list(lines)
        rows = []
        try:
            for line in lines:
                quantity = _require_positive(line.requested_quantity)
                item = inventory.get(db, line.item_id)
                if item is None or not item.is_active:
                    raise ItemNotFoundError(line.item_id)
                rows.append(item_request.build(item=item, actor=actor, quantity=quantity, notes=line.notes))
            db.add_all(rows)
            db.commit()
        except Exception:
            db.rollback()
            raise

        for row in rows:
            db.refresh(row)
            logger.info(
                f"Request {row.id} submitted by user {actor.user_id}: "
                f"{row.requested_quantity} x '{row.item_name}'"
            )
        return rows

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_request(self, db: Session, *, request_id: int, actor: Actor) -> ItemRequest:
        request = (
            item_request.visible_query(db, actor=actor)
            .filter(ItemRequest.id == request_id)
            .first()
        )
        if request is not None:
            return request
        if item_request.get(db, request_id) is None:
            raise NotFoundError("Request", request_id)
        raise ForbiddenError(
            f"You do not have access to request {request_id}", request_id=request_id
        )

    def list_requests(
        self,
        db: Session,
        *,
        actor: Actor,
        scope: RequestScope = RequestScope.ALL,
        status: Optional[RequestStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ItemRequest]:
        return item_request.get_visible(
            db, actor=actor, scope=scope, status=status, skip=skip, limit=limit
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve(
        self,
        db: Session,
        *,
        request_id: int,
        actor: Actor,
        target_status: Optional[RequestStatus] = None,
        admin_notes: Optional[str] = None,
    ) -> ItemRequest:
        target = target_status or default_approval_target(actor.role)

        def work() -> ItemRequest:
            request = self._lock_request(db, request_id)
            if target not in APPROVAL_TARGETS:
                raise InvalidTransitionError(request_id, request.status, f"approve to {target.value}")
            self._authorize(request, actor, target, "approve")
            previous = request.status
            request.status = target
            self._stamp_response(request, actor, admin_notes)
            self._log_transition(request, actor, "approve", previous)
            return request

        return self._run(db, "approve", request_id, work)

    def reject(
        self,
        db: Session,
        *,
        request_id: int,
        actor: Actor,
        reason: str,
        admin_notes: Optional[str] = None,
    ) -> ItemRequest:
        if not reason or not reason.strip():
            raise ReasonRequiredError(request_id)

        def work() -> ItemRequest:
            request = self._lock_request(db, request_id)
            self._authorize(request, actor, RequestStatus.REJECTED, "reject")
            previous = request.status
            request.status = RequestStatus.REJECTED
            request.rejection_reason = reason.strip()
            self._stamp_response(request, actor, admin_notes)
            self._log_transition(request, actor, "reject", previous)
            return request

        return self._run(db, "reject", request_id, work)

    def fulfill(
        self,
        db: Session,
        *,
        request_id: int,
        actor: Actor,
        quantity: int,
        admin_notes: Optional[str] = None,
    ) -> ItemRequest:
        """Release ``quantity`` units of stock against an approved request.

        The inventory decrement and the request update are flushed in the same
        transaction and committed together.
        """
        quantity = _require_positive(quantity)

        def work() -> ItemRequest:
            self._apply_lock_timeout(db)
            request = self._lock_request(db, request_id)
            self._authorize(request, actor, RequestStatus.FULFILLED, "fulfill")

            remaining = request.requested_quantity - request.fulfilled_quantity
            if quantity > remaining:
                raise OverFulfillmentError(request_id, quantity, remaining)

            item = inventory.get_for_update(db, request.item_id)
            if item is None:
                raise ItemNotFoundError(request.item_id)
            if quantity > item.quantity:
                raise InsufficientStockError(item.id, quantity, item.quantity)

            previous = request.status
            inventory.adjust_quantity(
                db,
                item_id=item.id,
                delta=-quantity,
                kind=MovementKind.FULFILLMENT,
                actor=actor,
                request_id=request.id,
                notes=f"Request #{request.id}",
                commit=False,
            )
            item_request.apply_fulfillment(
                db, request=request, quantity=quantity, actor=actor, admin_notes=admin_notes
            )
            self._log_transition(request, actor, f"fulfill {quantity}", previous)
            return request

        return self._run(db, "fulfill", request_id, work)

    def cancel(self, db: Session, *, request_id: int, actor: Actor) -> ItemRequest:
        def work() -> ItemRequest:
            request = self._lock_request(db, request_id)
            self._authorize(request, actor, RequestStatus.CANCELLED, "cancel")
            if request.requester_id != actor.user_id:
                raise ForbiddenError(
                    "Only the original requester can cancel a request",
                    request_id=request_id,
                )
            previous = request.status
            request.status = RequestStatus.CANCELLED
            request.response_date = _utcnow()
            self._log_transition(request, actor, "cancel", previous)
            return request

        return self._run(db, "cancel", request_id, work)

    def transition(
        self, db: Session, *, request_id: int, actor: Actor, payload: TransitionRequest
    ) -> ItemRequest:
        """Dispatch a generic ``{action, ...payload}`` call to the matching transition."""
        if payload.action == RequestAction.APPROVE:
            return self.approve(
                db,
                request_id=request_id,
                actor=actor,
                target_status=payload.target_status,
                admin_notes=payload.admin_notes,
            )
        if payload.action == RequestAction.REJECT:
            return self.reject(
                db,
                request_id=request_id,
                actor=actor,
                reason=payload.reason or "",
                admin_notes=payload.admin_notes,
            )
        if payload.action == RequestAction.FULFILL:
            return self.fulfill(
                db,
                request_id=request_id,
                actor=actor,
                quantity=payload.quantity,
                admin_notes=payload.admin_notes,
            )
        return self.cancel(db, request_id=request_id, actor=actor)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, db: Session, action: str, request_id: int, work: Callable[[], T]) -> T:
        """Run ``work`` and commit, retrying on lock failures with fresh reads."""
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                result = work()
                db.commit()
                db.refresh(result)
                return result
            except (ConflictError, OperationalError) as exc:
                db.rollback()
                if attempt < attempts:
                    logger.warning(
                        f"Retrying {action} on request {request_id} after "
                        f"{type(exc).__name__} (attempt {attempt}/{attempts})"
                    )
                    continue
                logger.error(f"Giving up {action} on request {request_id}: {exc}")
                if isinstance(exc, ConflictError):
                    raise
                raise ConflictError(
                    f"Request {request_id} could not be updated because of a concurrent change",
                    request_id=request_id,
                ) from exc
            except Exception:
                db.rollback()
                raise

    def _lock_request(self, db: Session, request_id: int) -> ItemRequest:
        request = item_request.get_for_update(db, request_id)
        if request is None:
            raise NotFoundError("Request", request_id)
        return request

    def _authorize(
        self, request: ItemRequest, actor: Actor, to_status: RequestStatus, action: str
    ) -> None:
        if not is_legal_transition(request.status, to_status):
            raise InvalidTransitionError(request.id, request.status, action)
        if not can_transition(actor.role, request.status, to_status):
            raise ForbiddenError(
                f"Role {actor.role.value} may not {action} a {request.status.value} request",
                request_id=request.id,
                role=actor.role.value,
            )
        if actor.role == UserRole.DEPARTMENT_HEAD and action in ("approve", "reject"):
            if request.requester_id == actor.user_id:
                raise ForbiddenError(
                    "You cannot approve or reject your own request", request_id=request.id
                )
            if request.requester_department_id != actor.department_id:
                raise ForbiddenError(
                    "Department heads can only act on requests from their own department",
                    request_id=request.id,
                )

    @staticmethod
    def _stamp_response(request: ItemRequest, actor: Actor, admin_notes: Optional[str]) -> None:
        if request.approver_id is None:
            request.approver_id = actor.user_id
            request.approver_name = actor.full_name
            request.approver_role = actor.role.value
        if admin_notes is not None:
            request.admin_notes = admin_notes
        request.response_date = _utcnow()

    @staticmethod
    def _apply_lock_timeout(db: Session) -> None:
        if settings.LOCK_TIMEOUT_MS and db.get_bind().dialect.name == "postgresql":
            db.execute(text(f"SET LOCAL lock_timeout = {int(settings.LOCK_TIMEOUT_MS)}"))

    @staticmethod
    def _log_transition(
        request: ItemRequest, actor: Actor, action: str, previous: RequestStatus
    ) -> None:
        logger.info(
            f"Request {request.id}: {action} by user {actor.user_id} ({actor.role.value}) "
            f"{previous.value} -> {request.status.value}"
        )


lifecycle = RequestLifecycle()

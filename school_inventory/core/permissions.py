"""
Role-based access policy for the item-request workflow and stock handling.

``can_transition`` is a pure function of (role, from_status, to_status). It
answers "may this role take this edge"; whether the edge exists at all is
answered by ``is_legal_transition``, so the engine can tell an illegal move
(InvalidTransition) from an unauthorised one (Forbidden).
"""
from typing import Dict, FrozenSet, Tuple

from school_inventory.core.config import settings
from school_inventory.models.item_request import RequestStatus
from school_inventory.models.user import UserRole

S = RequestStatus

Edge = Tuple[RequestStatus, RequestStatus]

# Edges of the request state machine. Fulfilled -> Fulfilled is the
# incremental-fulfillment edge; it always ends in OverFulfillment because
# nothing remains, but it is a status-legal call.
LEGAL_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    S.PENDING: frozenset({S.DEPARTMENT_APPROVED, S.APPROVED, S.REJECTED, S.CANCELLED}),
    S.DEPARTMENT_APPROVED: frozenset({S.APPROVED, S.REJECTED}),
    S.APPROVED: frozenset({S.FULFILLED}),
    S.FULFILLED: frozenset({S.FULFILLED}),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({S.REJECTED, S.FULFILLED, S.CANCELLED})

_CANCEL_OWN: FrozenSet[Edge] = frozenset({(S.PENDING, S.CANCELLED)})

_REJECT: FrozenSet[Edge] = frozenset({
    (S.PENDING, S.REJECTED),
    (S.DEPARTMENT_APPROVED, S.REJECTED),
})

_FULFILL: FrozenSet[Edge] = frozenset({
    (S.APPROVED, S.FULFILLED),
    (S.FULFILLED, S.FULFILLED),
})

ROLE_EDGES: Dict[UserRole, FrozenSet[Edge]] = {
    UserRole.STAFF: _CANCEL_OWN,
    UserRole.DEPARTMENT_HEAD: _CANCEL_OWN | _REJECT | frozenset({
        (S.PENDING, S.DEPARTMENT_APPROVED),
        (S.PENDING, S.APPROVED),
    }),
    UserRole.STOCK_MANAGER: _CANCEL_OWN | _REJECT | _FULFILL | frozenset({
        (S.DEPARTMENT_APPROVED, S.APPROVED),
    }),
    UserRole.ADMIN: _CANCEL_OWN | _REJECT | frozenset({
        (S.PENDING, S.APPROVED),
        (S.DEPARTMENT_APPROVED, S.APPROVED),
    }),
}

INVENTORY_MANAGER_ROLES = frozenset({UserRole.ADMIN, UserRole.STOCK_MANAGER})
REQUEST_OVERSIGHT_ROLES = frozenset({UserRole.ADMIN, UserRole.STOCK_MANAGER})


def is_legal_transition(from_status: RequestStatus, to_status: RequestStatus) -> bool:
    return to_status in LEGAL_TRANSITIONS.get(from_status, frozenset())


def can_transition(role: UserRole, from_status: RequestStatus, to_status: RequestStatus) -> bool:
    """Return True if ``role`` may move a request from ``from_status`` to ``to_status``."""
    if not is_legal_transition(from_status, to_status):
        return False
    edge = (from_status, to_status)
    if edge in ROLE_EDGES.get(role, frozenset()):
        return True
    return role == UserRole.ADMIN and settings.ADMIN_CAN_FULFILL and edge in _FULFILL


def can_manage_inventory(role: UserRole) -> bool:
    """Only stock handlers may add items or change quantities directly."""
    return role in INVENTORY_MANAGER_ROLES


def can_view_all_requests(role: UserRole) -> bool:
    return role in REQUEST_OVERSIGHT_ROLES


def default_approval_target(role: UserRole) -> RequestStatus:
    """Department heads give department approval; everyone else gives final approval."""
    if role == UserRole.DEPARTMENT_HEAD:
        return S.DEPARTMENT_APPROVED
    return S.APPROVED

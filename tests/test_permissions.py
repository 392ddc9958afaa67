"""Tests for the role/transition policy table."""

import pytest

from school_inventory.core import permissions
from school_inventory.core.config import settings
from school_inventory.models.item_request import RequestStatus as S
from school_inventory.models.user import UserRole as R


@pytest.mark.parametrize(
    "role, from_status, to_status, allowed",
    [
        (R.STAFF, S.PENDING, S.CANCELLED, True),
        (R.STAFF, S.PENDING, S.APPROVED, False),
        (R.STAFF, S.APPROVED, S.FULFILLED, False),
        (R.DEPARTMENT_HEAD, S.PENDING, S.DEPARTMENT_APPROVED, True),
        (R.DEPARTMENT_HEAD, S.PENDING, S.APPROVED, True),
        (R.DEPARTMENT_HEAD, S.DEPARTMENT_APPROVED, S.APPROVED, False),
        (R.DEPARTMENT_HEAD, S.PENDING, S.REJECTED, True),
        (R.DEPARTMENT_HEAD, S.APPROVED, S.FULFILLED, False),
        (R.STOCK_MANAGER, S.PENDING, S.APPROVED, False),
        (R.STOCK_MANAGER, S.DEPARTMENT_APPROVED, S.APPROVED, True),
        (R.STOCK_MANAGER, S.DEPARTMENT_APPROVED, S.REJECTED, True),
        (R.STOCK_MANAGER, S.APPROVED, S.FULFILLED, True),
        (R.STOCK_MANAGER, S.FULFILLED, S.FULFILLED, True),
        (R.ADMIN, S.PENDING, S.APPROVED, True),
        (R.ADMIN, S.DEPARTMENT_APPROVED, S.APPROVED, True),
        (R.ADMIN, S.PENDING, S.REJECTED, True),
        (R.ADMIN, S.APPROVED, S.FULFILLED, False),
    ],
)
def test_can_transition(role, from_status, to_status, allowed):
    assert permissions.can_transition(role, from_status, to_status) is allowed


@pytest.mark.parametrize("role", list(R))
@pytest.mark.parametrize(
    "from_status, to_status",
    [
        (S.FULFILLED, S.REJECTED),
        (S.REJECTED, S.APPROVED),
        (S.CANCELLED, S.PENDING),
        (S.APPROVED, S.CANCELLED),
        (S.APPROVED, S.APPROVED),
    ],
)
def test_illegal_edges_are_denied_for_every_role(role, from_status, to_status):
    assert not permissions.is_legal_transition(from_status, to_status)
    assert not permissions.can_transition(role, from_status, to_status)


def test_terminal_statuses_have_no_exits_except_fulfill_retry():
    assert permissions.LEGAL_TRANSITIONS[S.REJECTED] == frozenset()
    assert permissions.LEGAL_TRANSITIONS[S.CANCELLED] == frozenset()
    assert permissions.LEGAL_TRANSITIONS[S.FULFILLED] == frozenset({S.FULFILLED})
    assert permissions.TERMINAL_STATUSES == {S.REJECTED, S.FULFILLED, S.CANCELLED}


def test_admin_fulfill_is_a_setting(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_CAN_FULFILL", True)
    assert permissions.can_transition(R.ADMIN, S.APPROVED, S.FULFILLED)


def test_inventory_management_roles():
    assert permissions.can_manage_inventory(R.ADMIN)
    assert permissions.can_manage_inventory(R.STOCK_MANAGER)
    assert not permissions.can_manage_inventory(R.DEPARTMENT_HEAD)
    assert not permissions.can_manage_inventory(R.STAFF)


def test_default_approval_target():
    assert permissions.default_approval_target(R.DEPARTMENT_HEAD) == S.DEPARTMENT_APPROVED
    assert permissions.default_approval_target(R.STOCK_MANAGER) == S.APPROVED
    assert permissions.default_approval_target(R.ADMIN) == S.APPROVED

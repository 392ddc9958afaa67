# File: school_inventory/api/v1/endpoints/item_requests.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from school_inventory import schemas
from school_inventory.api import deps
from school_inventory.db.database import get_db
from school_inventory.models.item_request import RequestStatus
from school_inventory.services.request_lifecycle import lifecycle

router = APIRouter()


@router.get("/", response_model=List[schemas.ItemRequest])
def list_requests(
    *,
    db: Session = Depends(get_db),
    scope: schemas.RequestScope = schemas.RequestScope.ALL,
    status: Optional[RequestStatus] = None,
    skip: int = 0,
    limit: int = Query(100, le=500),
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    """Requests visible to the caller. ``scope=mine`` limits to own requests."""
    return lifecycle.list_requests(
        db, actor=actor, scope=scope, status=status, skip=skip, limit=limit
    )


@router.post("/", response_model=schemas.ItemRequest, status_code=201)
def submit_request(
    *,
    db: Session = Depends(get_db),
    request_in: schemas.ItemRequestCreate,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.submit_request(
        db,
        actor=actor,
        item_id=request_in.item_id,
        quantity=request_in.requested_quantity,
        notes=request_in.notes,
    )


@router.post("/batch", response_model=List[schemas.ItemRequest], status_code=201)
def submit_batch(
    *,
    db: Session = Depends(get_db),
    batch_in: schemas.ItemRequestBatch,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    """Submit several lines at once; nothing is stored if any line is invalid"""
    return lifecycle.submit_batch(db, actor=actor, lines=batch_in.lines)


@router.get("/{request_id}", response_model=schemas.ItemRequest)
def get_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.get_request(db, request_id=request_id, actor=actor)


@router.post("/{request_id}/transition", response_model=schemas.ItemRequest)
def transition_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    payload: schemas.TransitionRequest,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.transition(db, request_id=request_id, actor=actor, payload=payload)


@router.post("/{request_id}/approve", response_model=schemas.ItemRequest)
def approve_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    action: Optional[schemas.ApprovalAction] = None,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    action = action or schemas.ApprovalAction()
    return lifecycle.approve(
        db,
        request_id=request_id,
        actor=actor,
        target_status=action.target_status,
        admin_notes=action.admin_notes,
    )


@router.post("/{request_id}/reject", response_model=schemas.ItemRequest)
def reject_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    action: schemas.RejectionAction,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.reject(
        db,
        request_id=request_id,
        actor=actor,
        reason=action.reason,
        admin_notes=action.admin_notes,
    )


@router.post("/{request_id}/fulfill", response_model=schemas.ItemRequest)
def fulfill_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    action: schemas.FulfillmentAction,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.fulfill(
        db,
        request_id=request_id,
        actor=actor,
        quantity=action.quantity,
        admin_notes=action.admin_notes,
    )


@router.post("/{request_id}/cancel", response_model=schemas.ItemRequest)
def cancel_request(
    *,
    db: Session = Depends(get_db),
    request_id: int,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return lifecycle.cancel(db, request_id=request_id, actor=actor)

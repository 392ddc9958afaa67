# File: school_inventory/api/v1/endpoints/inventory.py
from datetime import datetime
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from school_inventory import crud, schemas
from school_inventory.api import deps
from school_inventory.db.database import get_db
from school_inventory.models.inventory import InventoryStatus

router = APIRouter()


@router.get("/", response_model=List[schemas.InventoryItem])
def list_inventory(
    *,
    db: Session = Depends(get_db),
    category: Optional[str] = None,
    status: Optional[InventoryStatus] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = Query(100, le=500),
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    """Catalog of items, any authenticated user can browse it"""
    return crud.inventory.get_filtered(
        db,
        category=category,
        status=status,
        search=search,
        include_inactive=include_inactive,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=schemas.InventoryItem, status_code=201)
def create_inventory_item(
    *,
    db: Session = Depends(get_db),
    item_in: schemas.InventoryCreate,
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    return crud.inventory.add_item(db, obj_in=item_in, actor=actor)


@router.get("/movements", response_model=List[schemas.StockMovement])
def list_movements(
    *,
    db: Session = Depends(get_db),
    since: Optional[datetime] = None,
    skip: int = 0,
    limit: int = Query(100, le=500),
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    """Stock ledger across all items, newest first"""
    return crud.inventory.get_movements(db, since=since, skip=skip, limit=limit)


@router.get("/{item_id}", response_model=schemas.InventoryItem)
def get_inventory_item(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    return crud.inventory.get_or_404(db, item_id)


@router.put("/{item_id}", response_model=schemas.InventoryItem)
def update_inventory_item(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    item_in: schemas.InventoryUpdate,
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    item = crud.inventory.get_or_404(db, item_id)
    return crud.inventory.update_item(db, db_obj=item, obj_in=item_in)


@router.delete("/{item_id}", response_model=schemas.InventoryItem)
def delete_inventory_item(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    """Deactivate an item. Existing requests keep their reference to it."""
    item = crud.inventory.get_or_404(db, item_id)
    return crud.inventory.deactivate(db, db_obj=item)


@router.post("/{item_id}/add-stock", response_model=schemas.InventoryItem)
def add_stock(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    change: schemas.StockChange,
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    return crud.inventory.add_stock(
        db, item_id=item_id, quantity=change.quantity, actor=actor, notes=change.notes
    )


@router.post("/{item_id}/withdraw", response_model=schemas.InventoryItem)
def withdraw_stock(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    change: schemas.StockChange,
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    """Take stock out without a request (damage, loss, transfer)"""
    return crud.inventory.withdraw(
        db, item_id=item_id, quantity=change.quantity, actor=actor, notes=change.notes
    )


@router.get("/{item_id}/movements", response_model=List[schemas.StockMovement])
def list_item_movements(
    *,
    db: Session = Depends(get_db),
    item_id: int,
    skip: int = 0,
    limit: int = Query(100, le=500),
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    crud.inventory.get_or_404(db, item_id)
    return crud.inventory.get_movements(db, item_id=item_id, skip=skip, limit=limit)

# File: school_inventory/api/v1/endpoints/reports.py
from datetime import datetime
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from school_inventory import schemas
from school_inventory.api import deps
from school_inventory.db.database import get_db
from school_inventory.services import reporting

router = APIRouter()


@router.get("/inventory", response_model=schemas.InventorySummary)
def inventory_report(
    *,
    db: Session = Depends(get_db),
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    return reporting.inventory_summary(db)


@router.get("/requests", response_model=schemas.RequestSummary)
def request_report(
    *,
    db: Session = Depends(get_db),
    actor: schemas.Actor = Depends(deps.get_current_actor)
) -> Any:
    """Counts are limited to the requests the caller can see"""
    return reporting.request_summary(db, actor=actor)


@router.get("/movements", response_model=List[schemas.StockMovement])
def movement_report(
    *,
    db: Session = Depends(get_db),
    since: Optional[datetime] = None,
    limit: int = Query(200, le=1000),
    actor: schemas.Actor = Depends(deps.require_inventory_manager)
) -> Any:
    """Recent stock movements across all items"""
    return reporting.movement_history(db, since=since, limit=limit)

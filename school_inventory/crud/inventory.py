# File: school_inventory/crud/inventory.py
import logging
from typing import List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from school_inventory.core.exceptions import (
    DuplicateItemError,
    InsufficientStockError,
    InvalidQuantityError,
    InventoryError,
    ItemNotFoundError,
)
from school_inventory.crud.base import CRUDBase
from school_inventory.models.inventory import InventoryItem, InventoryStatus
from school_inventory.models.stock_movement import MovementKind, StockMovement
from school_inventory.schemas.auth import Actor
from school_inventory.schemas.inventory import InventoryCreate, InventoryUpdate

logger = logging.getLogger(__name__)


class CRUDInventory(CRUDBase[InventoryItem, InventoryCreate, InventoryUpdate]):
    required_fields = ("name", "category")

    def get_or_404(self, db: Session, item_id: int) -> InventoryItem:
        item = self.get(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def get_active_or_404(self, db: Session, item_id: int) -> InventoryItem:
        item = self.get(db, item_id)
        if item is None or not item.is_active:
            raise ItemNotFoundError(item_id)
        return item

    def get_for_update(self, db: Session, item_id: int) -> Optional[InventoryItem]:
        """Read the item row holding an exclusive lock until commit/rollback."""
        return (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def get_by_name(
        self, db: Session, *, name: str, owner_id: Optional[int] = None
    ) -> Optional[InventoryItem]:
        """Case-insensitive lookup among active items of one owning scope."""
        query = db.query(InventoryItem).filter(
            func.lower(InventoryItem.name) == name.strip().lower(),
            InventoryItem.is_active == True,
        )
        if owner_id is None:
            query = query.filter(InventoryItem.owner_id.is_(None))
        else:
            query = query.filter(InventoryItem.owner_id == owner_id)
        return query.first()

    def get_filtered(
        self,
        db: Session,
        *,
        category: Optional[str] = None,
        status: Optional[InventoryStatus] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[InventoryItem]:
        query = db.query(InventoryItem)
        if not include_inactive:
            query = query.filter(InventoryItem.is_active == True)
        if category:
            query = query.filter(InventoryItem.category == category)
        if status:
            query = query.filter(InventoryItem.status == InventoryStatus(status).value)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(InventoryItem.name).like(pattern),
                    func.lower(InventoryItem.category).like(pattern),
                )
            )
        return query.order_by(InventoryItem.name).offset(skip).limit(limit).all()

    def add_item(
        self, db: Session, *, obj_in: InventoryCreate, actor: Optional[Actor] = None
    ) -> InventoryItem:
        name = obj_in.name.strip()
        if self.get_by_name(db, name=name, owner_id=obj_in.owner_id):
            raise DuplicateItemError(name, obj_in.owner_id)

        quantity = max(obj_in.quantity, 0)
        item = InventoryItem(
            name=name,
            category=obj_in.category.strip(),
            quantity=quantity,
            location=obj_in.location,
            owner_id=obj_in.owner_id,
            created_by=actor.full_name if actor else None,
        )
        db.add(item)
        db.flush()
        if quantity:
            self._record_movement(
                db,
                item=item,
                kind=MovementKind.ADD_STOCK,
                delta=quantity,
                actor=actor,
                notes="Initial stock",
            )
        db.commit()
        db.refresh(item)
        logger.info(f"Added item {item.id} '{item.name}' ({item.category}) with {item.quantity} units")
        return item

    def update_item(
        self, db: Session, *, db_obj: InventoryItem, obj_in: InventoryUpdate
    ) -> InventoryItem:
        update_data = self.update_data(obj_in)
        new_name = update_data.get("name")
        if new_name and new_name.strip().lower() != db_obj.name.lower():
            existing = self.get_by_name(db, name=new_name, owner_id=db_obj.owner_id)
            if existing and existing.id != db_obj.id:
                raise DuplicateItemError(new_name.strip(), db_obj.owner_id)
            update_data["name"] = new_name.strip()
        return self.update(db, db_obj=db_obj, obj_in=update_data)

    def adjust_quantity(
        self,
        db: Session,
        *,
        item_id: int,
        delta: int,
        kind: MovementKind,
        actor: Optional[Actor] = None,
        request_id: Optional[int] = None,
        notes: Optional[str] = None,
        commit: bool = True,
    ) -> InventoryItem:
        """Apply ``delta`` to an item's quantity.

        This is the only code path that changes a quantity. The UPDATE is
        guarded with ``quantity >= -delta`` so the row can never go negative,
        whatever the caller read beforehand. With ``commit=False`` the change
        is only flushed and the caller owns the transaction.
        """
        try:
            stmt = (
                update(InventoryItem)
                .where(InventoryItem.id == item_id)
                .values(quantity=InventoryItem.quantity + delta)
                .execution_options(synchronize_session=False)
            )
            if delta < 0:
                stmt = stmt.where(InventoryItem.quantity >= -delta)
            result = db.execute(stmt)

            item = db.get(InventoryItem, item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            db.refresh(item)
            if result.rowcount == 0:
                raise InsufficientStockError(item_id, -delta, item.quantity)

            if delta:
                self._record_movement(
                    db,
                    item=item,
                    kind=kind,
                    delta=delta,
                    actor=actor,
                    request_id=request_id,
                    notes=notes,
                )
            if commit:
                db.commit()
                db.refresh(item)
            else:
                db.flush()
        except InventoryError:
            if commit:
                db.rollback()
            raise

        logger.debug(f"Item {item_id} adjusted by {delta} ({kind.value}), now {item.quantity}")
        return item

    def add_stock(
        self, db: Session, *, item_id: int, quantity: int, actor: Actor, notes: Optional[str] = None
    ) -> InventoryItem:
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        self.get_active_or_404(db, item_id)
        return self.adjust_quantity(
            db, item_id=item_id, delta=quantity, kind=MovementKind.ADD_STOCK, actor=actor, notes=notes
        )

    def withdraw(
        self, db: Session, *, item_id: int, quantity: int, actor: Actor, notes: Optional[str] = None
    ) -> InventoryItem:
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        self.get_active_or_404(db, item_id)
        return self.adjust_quantity(
            db, item_id=item_id, delta=-quantity, kind=MovementKind.WITHDRAWAL, actor=actor, notes=notes
        )

    def deactivate(self, db: Session, *, db_obj: InventoryItem) -> InventoryItem:
        """Soft delete: requests keep referencing the row."""
        db_obj.is_active = False
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Deactivated item {db_obj.id} '{db_obj.name}'")
        return db_obj

    def get_movements(
        self,
        db: Session,
        *,
        item_id: Optional[int] = None,
        since=None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[StockMovement]:
        query = db.query(StockMovement)
        if item_id is not None:
            query = query.filter(StockMovement.item_id == item_id)
        if since is not None:
            query = query.filter(StockMovement.created_at >= since)
        return (
            query.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def _record_movement(
        self,
        db: Session,
        *,
        item: InventoryItem,
        kind: MovementKind,
        delta: int,
        actor: Optional[Actor] = None,
        request_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> StockMovement:
        movement = StockMovement(
            item_id=item.id,
            item_name=item.name,
            kind=kind,
            quantity_delta=delta,
            quantity_after=item.quantity,
            actor_id=actor.user_id if actor else None,
            actor_name=actor.full_name if actor else None,
            request_id=request_id,
            notes=notes,
        )
        db.add(movement)
        return movement


inventory = CRUDInventory(InventoryItem)

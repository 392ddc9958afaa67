# File: school_inventory/services/request_composer.py
"""
Cart-like batching of item requests before submission.

A composer lives only as long as the client session that fills it. Its
stock checks run against a cached snapshot and are advisory; the lifecycle
engine validates everything again when the batch is submitted.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from school_inventory.models.item_request import ItemRequest
from school_inventory.schemas.auth import Actor
from school_inventory.schemas.item_request import ItemRequestCreate
from school_inventory.services.request_lifecycle import RequestLifecycle, lifecycle


@dataclass
class ComposerLine:
    item_id: int
    quantity: int
    notes: Optional[str] = None


@dataclass
class ComposerProblem:
    item_id: int
    message: str


@dataclass
class RequestComposer:
    lines: List[ComposerLine] = field(default_factory=list)

    def add(self, item_id: int, quantity: int = 1, notes: Optional[str] = None) -> ComposerLine:
        """Add an item, merging into an existing line for the same item."""
        line = self._find(item_id)
        if line is not None:
            line.quantity += quantity
            if notes:
                line.notes = notes
            return line
        line = ComposerLine(item_id=item_id, quantity=quantity, notes=notes)
        self.lines.append(line)
        return line

    def set_quantity(self, item_id: int, quantity: int) -> None:
        line = self._find(item_id)
        if line is None:
            raise KeyError(item_id)
        line.quantity = quantity

    def remove(self, item_id: int) -> None:
        self.lines = [line for line in self.lines if line.item_id != item_id]

    def clear(self) -> None:
        self.lines = []

    def __len__(self) -> int:
        return len(self.lines)

    def validate(self, stock: Mapping[int, int]) -> List[ComposerProblem]:
        """Check lines against a cached ``{item_id: quantity}`` snapshot."""
        problems = []
        for line in self.lines:
            if line.item_id not in stock:
                problems.append(ComposerProblem(line.item_id, "Item is no longer in the catalog"))
            elif line.quantity <= 0:
                problems.append(ComposerProblem(line.item_id, "Quantity must be at least 1"))
            elif line.quantity > stock[line.item_id]:
                problems.append(
                    ComposerProblem(
                        line.item_id,
                        f"Only {stock[line.item_id]} in stock, {line.quantity} requested",
                    )
                )
        return problems

    def to_payload(self) -> List[ItemRequestCreate]:
        return [
            ItemRequestCreate(item_id=line.item_id, requested_quantity=line.quantity, notes=line.notes)
            for line in self.lines
        ]

    def submit(
        self, db: Session, *, actor: Actor, engine: RequestLifecycle = lifecycle
    ) -> List[ItemRequest]:
        """Submit every line as its own request and empty the composer."""
        created = engine.submit_batch(db, actor=actor, lines=self.to_payload())
        self.clear()
        return created

    def _find(self, item_id: int) -> Optional[ComposerLine]:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None


def stock_snapshot(items) -> Dict[int, int]:
    """Build the ``{item_id: quantity}`` map ``RequestComposer.validate`` expects."""
    return {item.id: item.quantity for item in items}

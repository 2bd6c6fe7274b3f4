"""In-memory cart: line items with prices locked in at add time."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from services.ordering_service.customization import CustomizationSnapshot


@dataclass(frozen=True)
class ProductRef:
    """The parts of a product a cart line needs to remember."""

    id: str
    name: str


@dataclass
class CartLineItem:
    product_id: str
    product_name: str
    base_unit_price: Decimal
    quantity: int
    customizations: tuple[CustomizationSnapshot, ...] = ()
    special_instructions: Optional[str] = None
    # Fixed when the line is created; catalog price changes never reach it
    unit_price: Decimal = field(init=False)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.unit_price = self.base_unit_price + sum(
            (c.option_price for c in self.customizations), Decimal("0")
        )

    @property
    def is_customized(self) -> bool:
        return bool(self.customizations)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Ordered collection of cart lines for one user session.

    Insertion order is kept for display only; totals do not depend on it.
    Every operation is total: unknown line ids and odd quantities never raise.
    """

    def __init__(self) -> None:
        self._lines: list[CartLineItem] = []

    @property
    def lines(self) -> tuple[CartLineItem, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get(self, line_id: str) -> Optional[CartLineItem]:
        return next((line for line in self._lines if line.id == line_id), None)

    def add_item(
        self,
        product: ProductRef,
        unit_price: Decimal,
        customizations: Optional[Iterable[CustomizationSnapshot]] = None,
        instructions: Optional[str] = None,
        quantity: int = 1,
    ) -> CartLineItem:
        """Add ``quantity`` of a product and return the line it landed on.

        Plain (uncustomized) additions merge into an existing plain line for
        the same product only when both carry the same special instructions
        (or neither has any).
        """
        snapshots = tuple(customizations or ())
        instructions = (instructions or "").strip() or None

        if not snapshots:
            for line in self._lines:
                if (
                    line.product_id == product.id
                    and not line.is_customized
                    and instructions == line.special_instructions
                ):
                    line.quantity += quantity
                    return line

        line = CartLineItem(
            product_id=product.id,
            product_name=product.name,
            base_unit_price=Decimal(unit_price),
            quantity=quantity,
            customizations=snapshots,
            special_instructions=instructions,
        )
        self._lines.append(line)
        return line

    def remove_item(self, line_id: str) -> None:
        self._lines = [line for line in self._lines if line.id != line_id]

    def update_quantity(self, line_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(line_id)
            return
        line = self.get(line_id)
        if line is not None:
            line.quantity = quantity

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def clear(self) -> None:
        self._lines.clear()

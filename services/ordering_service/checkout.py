"""Checkout orchestration: preconditions, server-side pricing, order + points commit.

The orchestrator talks to its collaborators only through the protocols
below; ``services/*_ops.py`` implement them on Postgres and the tests use
in-memory fakes. Persisting happens inside the caller's unit of work: the
order sink stages the order, the ledger stages the debit, and the router
commits once both succeeded.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import ClassVar, Optional, Protocol, Sequence, Union

from fastapi import status
from libs.common.logging import get_logger
from libs.common.rejections import Rejection
from services.ordering_service.availability import StoreStatus, is_open_now
from services.ordering_service.cart import Cart, ProductRef
from services.ordering_service.customization import (
    CapacityExceeded,
    CategoryWithOptions,
    CustomizationSelector,
    CustomizationSnapshot,
    Option,
    OptionCategory,
)
from services.ordering_service.loyalty import (
    InsufficientPoints,
    PointsDebit,
    PointsLedger,
    RedemptionQuote,
    apply_redemption,
    commit_redemption,
)

logger = get_logger(__name__)


# ============================================================================
# COLLABORATORS
# ============================================================================


@dataclass(frozen=True)
class ProductInfo:
    id: str
    name: str
    base_price: Decimal
    ingredients: tuple[str, ...] = ()
    name_en: Optional[str] = None
    is_available: bool = True


class CatalogLookup(Protocol):
    async def get_product(self, product_id: str) -> Optional[ProductInfo]: ...

    async def get_customization_categories(
        self, product_id: str
    ) -> list[CategoryWithOptions]: ...


class StoreStatusSource(Protocol):
    async def get_store_status(self) -> StoreStatus: ...


@dataclass(frozen=True)
class OrderLineDraft:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    customizations: tuple[CustomizationSnapshot, ...] = ()
    special_instructions: Optional[str] = None


@dataclass(frozen=True)
class OrderDraft:
    order_id: uuid.UUID
    user_id: str
    lines: tuple[OrderLineDraft, ...]
    subtotal: Decimal
    points_used: Decimal
    final_total: Decimal
    delivery_address: Optional[str] = None
    address_id: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class OrderRecord:
    id: uuid.UUID
    order_number: str
    status: str
    subtotal: Decimal
    points_used: Decimal
    final_total: Decimal
    created_at: datetime


class OrderSink(Protocol):
    async def submit_order(self, draft: OrderDraft) -> OrderRecord: ...


# ============================================================================
# REJECTIONS
# ============================================================================


class CheckoutStep(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    ADDRESS_SELECTED = "address_selected"
    STORE_OPEN = "store_open"
    CART_NON_EMPTY = "cart_non_empty"


@dataclass(frozen=True)
class NotAuthenticated(Rejection):
    code = "not_authenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    step: ClassVar[CheckoutStep] = CheckoutStep.AUTHENTICATED

    @property
    def message(self) -> str:
        return "Please sign in to place an order"


@dataclass(frozen=True)
class AddressRequired(Rejection):
    code = "address_required"
    step: ClassVar[CheckoutStep] = CheckoutStep.ADDRESS_SELECTED

    @property
    def message(self) -> str:
        return "Please choose a delivery address"


@dataclass(frozen=True)
class StoreClosed(Rejection):
    code = "store_closed"
    status_code = status.HTTP_409_CONFLICT
    step: ClassVar[CheckoutStep] = CheckoutStep.STORE_OPEN

    @property
    def message(self) -> str:
        return "The store is not accepting orders right now"


@dataclass(frozen=True)
class CartEmpty(Rejection):
    code = "cart_empty"
    step: ClassVar[CheckoutStep] = CheckoutStep.CART_NON_EMPTY

    @property
    def message(self) -> str:
        return "Cart is empty"


@dataclass(frozen=True)
class ProductUnavailable(Rejection):
    product_id: str

    code = "product_unavailable"
    status_code = status.HTTP_409_CONFLICT

    @property
    def message(self) -> str:
        return f"Product {self.product_id} is not available"


@dataclass(frozen=True)
class UnknownOption(Rejection):
    product_id: str
    option_id: str

    code = "unknown_option"

    @property
    def message(self) -> str:
        return f"Option {self.option_id} is not offered for product {self.product_id}"


@dataclass(frozen=True)
class RequiredSelectionMissing(Rejection):
    product_id: str
    category: OptionCategory

    code = "required_selection_missing"

    @property
    def message(self) -> str:
        return f"Please choose an option from {self.category.name}"


CheckoutRejection = Union[
    NotAuthenticated,
    AddressRequired,
    StoreClosed,
    CartEmpty,
    ProductUnavailable,
    UnknownOption,
    RequiredSelectionMissing,
    CapacityExceeded,
    InsufficientPoints,
]


# ============================================================================
# REQUESTS / RESULTS
# ============================================================================


@dataclass(frozen=True)
class LineRequest:
    product_id: str
    option_ids: tuple[str, ...] = ()
    quantity: int = 1
    special_instructions: Optional[str] = None


@dataclass(frozen=True)
class CheckoutRequest:
    user_id: Optional[str]
    lines: tuple[LineRequest, ...]
    points_to_use: Decimal = Decimal("0")
    delivery_address: Optional[str] = None
    address_id: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @property
    def has_address(self) -> bool:
        return bool(self.address_id or (self.delivery_address or "").strip())


@dataclass
class PricedOrder:
    cart: Cart
    points_balance: Decimal
    redemption: RedemptionQuote

    @property
    def subtotal(self) -> Decimal:
        return self.redemption.subtotal

    @property
    def final_total(self) -> Decimal:
        return self.redemption.final_total


@dataclass
class PlacedOrder:
    order: OrderRecord
    priced: PricedOrder
    debit: PointsDebit
    warnings: list[str] = field(default_factory=list)


# ============================================================================
# PRICING
# ============================================================================


def _find_option(
    categories: Sequence[CategoryWithOptions], option_id: str
) -> Optional[tuple[OptionCategory, Option]]:
    for entry in categories:
        option = entry.find_option(option_id)
        if option is not None:
            return entry.category, option
    return None


async def build_cart(
    lines: Sequence[LineRequest], catalog: CatalogLookup
) -> Union[Cart, CheckoutRejection]:
    """Rebuild a cart from client line requests using live catalog prices."""
    cart = Cart()
    for line in lines:
        product = await catalog.get_product(line.product_id)
        if product is None or not product.is_available:
            return ProductUnavailable(line.product_id)

        categories = await catalog.get_customization_categories(product.id)
        selector = CustomizationSelector()
        # Duplicate ids would toggle an option back off
        for option_id in dict.fromkeys(line.option_ids):
            match = _find_option(categories, option_id)
            if match is None:
                return UnknownOption(product.id, option_id)
            category, option = match
            result = selector.toggle(category, option)
            if result.rejection is not None:
                return result.rejection

        missing = selector.missing_required(categories)
        if missing:
            return RequiredSelectionMissing(product.id, missing[0])

        cart.add_item(
            ProductRef(id=product.id, name=product.name),
            product.base_price,
            selector.to_customization_snapshots(),
            line.special_instructions,
            quantity=line.quantity,
        )
    return cart


async def quote_order(
    request: CheckoutRequest,
    *,
    catalog: CatalogLookup,
    ledger: Optional[PointsLedger],
) -> Union[PricedOrder, CheckoutRejection]:
    """Price a cart and a points request without persisting anything."""
    cart = await build_cart(request.lines, catalog)
    if isinstance(cart, Rejection):
        return cart

    balance = Decimal("0")
    if request.user_id and ledger is not None:
        balance = await ledger.get_balance(request.user_id)

    redemption = apply_redemption(cart.subtotal(), request.points_to_use, balance)
    return PricedOrder(cart=cart, points_balance=balance, redemption=redemption)


# ============================================================================
# PLACING ORDERS
# ============================================================================


async def check_preconditions(
    request: CheckoutRequest,
    *,
    status_source: StoreStatusSource,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[CheckoutRejection]:
    """Evaluate the checkout preconditions in order; return the first failure."""
    if not request.user_id:
        return NotAuthenticated()
    if not request.has_address:
        return AddressRequired()

    # Fetched on every attempt: an admin may have closed the store since
    store_status = await status_source.get_store_status()
    if not is_open_now(store_status, now, tz):
        return StoreClosed()

    if not request.lines:
        return CartEmpty()
    return None


async def place_order(
    request: CheckoutRequest,
    *,
    catalog: CatalogLookup,
    ledger: PointsLedger,
    status_source: StoreStatusSource,
    order_sink: OrderSink,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Union[PlacedOrder, CheckoutRejection]:
    rejection = await check_preconditions(
        request, status_source=status_source, now=now, tz=tz
    )
    if rejection is not None:
        logger.info("Checkout stopped at %s: %s", rejection.step.value, rejection.code)
        return rejection

    # Balance is re-read here rather than trusted from an earlier quote
    priced = await quote_order(request, catalog=catalog, ledger=ledger)
    if isinstance(priced, Rejection):
        return priced
    if priced.cart.is_empty:
        return CartEmpty()

    warnings = []
    if priced.redemption.clamped:
        warnings.append(
            f"Points reduced from {priced.redemption.requested} to {priced.redemption.accepted}"
        )

    draft = OrderDraft(
        order_id=uuid.uuid4(),
        user_id=request.user_id,
        lines=tuple(
            OrderLineDraft(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
                customizations=line.customizations,
                special_instructions=line.special_instructions,
            )
            for line in priced.cart.lines
        ),
        subtotal=priced.subtotal,
        points_used=priced.redemption.accepted,
        final_total=priced.final_total,
        delivery_address=request.delivery_address,
        address_id=request.address_id,
        phone=request.phone,
        notes=request.notes,
    )
    order = await order_sink.submit_order(draft)

    debit = await commit_redemption(
        ledger, request.user_id, order.id, priced.redemption.accepted
    )
    if isinstance(debit, InsufficientPoints):
        return debit

    logger.info(
        "Placed order %s for user %s: subtotal=%s points=%s total=%s",
        order.order_number,
        request.user_id,
        order.subtotal,
        order.points_used,
        order.final_total,
    )
    return PlacedOrder(order=order, priced=priced, debit=debit, warnings=warnings)

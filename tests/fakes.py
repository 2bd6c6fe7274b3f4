"""In-memory collaborators and auth helpers shared by the unit and API tests."""

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional
from zoneinfo import ZoneInfo

from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from services.ordering_service.availability import StoreStatus, load_store_status
from services.ordering_service.checkout import OrderDraft, OrderRecord, ProductInfo
from services.ordering_service.customization import CategoryWithOptions
from services.ordering_service.loyalty import InsufficientPoints, PointsDebit
from services.ordering_service.models import PointsHistoryType

STORE_TZ = ZoneInfo("Europe/Istanbul")
# Wednesday 12:00 in Istanbul
NOW = datetime(2026, 10, 21, 9, 0, tzinfo=timezone.utc)
USER_ID = "user-1"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeCatalog:
    def __init__(self):
        self.products: dict[str, ProductInfo] = {}
        self.categories: dict[str, list[CategoryWithOptions]] = {}

    def add(self, product: ProductInfo, *categories: CategoryWithOptions) -> ProductInfo:
        self.products[product.id] = product
        self.categories[product.id] = list(categories)
        return product

    async def get_product(self, product_id: str) -> Optional[ProductInfo]:
        return self.products.get(product_id)

    async def get_customization_categories(self, product_id: str):
        return list(self.categories.get(product_id, []))


class FakeLedger:
    def __init__(self, balances: Optional[dict] = None):
        self.balances = {k: Decimal(v) for k, v in (balances or {}).items()}
        self.history: list[SimpleNamespace] = []
        self.debit_calls = 0

    async def get_balance(self, user_id: str) -> Decimal:
        return self.balances.get(user_id, Decimal("0"))

    async def debit(self, user_id, order_id, amount):
        self.debit_calls += 1
        balance = await self.get_balance(user_id)
        if balance < amount:
            return InsufficientPoints(requested=amount, available=balance)
        self.balances[user_id] = balance - amount
        entry = SimpleNamespace(
            id=uuid.uuid4(),
            user_id=user_id,
            order_id=order_id,
            points=-amount,
            type=PointsHistoryType.USED,
            description="Points used for order",
            created_at=NOW,
        )
        self.history.append(entry)
        return PointsDebit(
            user_id=user_id,
            order_id=order_id,
            points=amount,
            balance_after=self.balances[user_id],
            history_id=entry.id,
        )

    async def list_history(self, user_id: str, limit: int = 50):
        return [h for h in reversed(self.history) if h.user_id == user_id][:limit]


class FakeStatusSource:
    """Holds either a StoreStatus or raw stored data validated on every read."""

    def __init__(self, status):
        self.status = status
        self.calls = 0

    async def get_store_status(self) -> StoreStatus:
        self.calls += 1
        if isinstance(self.status, StoreStatus):
            return self.status
        return load_store_status(self.status)


class FakeOrderSink:
    def __init__(self):
        self.drafts: list[OrderDraft] = []

    async def submit_order(self, draft: OrderDraft) -> OrderRecord:
        self.drafts.append(draft)
        return OrderRecord(
            id=draft.order_id,
            order_number=f"ORD{len(self.drafts):09d}",
            status="pending",
            subtotal=draft.subtotal,
            points_used=draft.points_used,
            final_total=draft.final_total,
            created_at=NOW,
        )


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_user(user_id: str = USER_ID, **overrides) -> AuthUser:
    data = {"user_id": user_id, "email": "member@example.com", "role": "authenticated"}
    data.update(overrides)
    return AuthUser(**data)


def make_admin(user_id: str = "admin-1") -> AuthUser:
    return make_user(user_id=user_id, app_metadata={"role": "admin"})


@contextmanager
def override_auth(app, user: Optional[AuthUser]):
    """Temporarily authenticate requests as ``user`` (None for anonymous)."""
    previous = {
        dep: app.dependency_overrides.get(dep)
        for dep in (get_current_user, get_optional_user)
    }
    app.dependency_overrides[get_optional_user] = lambda: user
    if user is None:
        app.dependency_overrides.pop(get_current_user, None)
    else:
        app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield
    finally:
        for dep, override in previous.items():
            if override is None:
                app.dependency_overrides.pop(dep, None)
            else:
                app.dependency_overrides[dep] = override

"""Shared fixtures: in-memory collaborators and an HTTP client wired to them.

API tests run against ``create_app()`` with the catalog, points ledger,
store status source and order sink replaced through dependency overrides,
so they need no database. Database-backed tests use ``db_session`` from the
root conftest instead.
"""

from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from libs.auth.dependencies import get_current_user, get_optional_user
from libs.common.currency import ExchangeRates
from libs.db.session import get_async_db
from services.ordering_service.availability import DEFAULT_WORKING_HOURS, StoreStatus
from services.ordering_service.checkout import ProductInfo
from services.ordering_service.customization import (
    CategoryWithOptions,
    Option,
    OptionCategory,
)
from services.ordering_service.dependencies import (
    get_catalog,
    get_earning_rule,
    get_exchange_rates,
    get_now,
    get_order_sink,
    get_points_ledger,
    get_store_status_source,
    get_store_tz,
)
from tests.fakes import (
    NOW,
    STORE_TZ,
    USER_ID,
    FakeCatalog,
    FakeLedger,
    FakeOrderSink,
    FakeStatusSource,
    make_user,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def extras() -> CategoryWithOptions:
    category = OptionCategory(id="extras", name="Ekstralar", name_en="Extras", max_selections=2)
    return CategoryWithOptions(
        category=category,
        options=(
            Option(id="cheese", category_id="extras", name="Cheddar", price=Decimal("10.00")),
            Option(id="bacon", category_id="extras", name="Bacon", price=Decimal("15.00")),
            Option(id="egg", category_id="extras", name="Yumurta", price=Decimal("8.00")),
        ),
    )


@pytest.fixture
def sauces() -> CategoryWithOptions:
    category = OptionCategory(
        id="sauce", name="Sos", name_en="Sauce", max_selections=1, is_required=True
    )
    return CategoryWithOptions(
        category=category,
        options=(
            Option(id="garlic", category_id="sauce", name="Sarımsaklı", price=Decimal("0")),
            Option(id="spicy", category_id="sauce", name="Acı", price=Decimal("5.00")),
        ),
    )


@pytest.fixture
def catalog(extras, sauces) -> FakeCatalog:
    catalog = FakeCatalog()
    catalog.add(ProductInfo(id="burger", name="Burger", base_price=Decimal("100.00")), extras)
    catalog.add(ProductInfo(id="wrap", name="Dürüm", base_price=Decimal("80.00")), sauces)
    catalog.add(ProductInfo(id="fries", name="Patates", base_price=Decimal("40.00")))
    catalog.add(
        ProductInfo(id="soup", name="Çorba", base_price=Decimal("30.00"), is_available=False)
    )
    return catalog


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger({USER_ID: "30"})


@pytest.fixture
def store_status() -> FakeStatusSource:
    return FakeStatusSource(
        StoreStatus(is_open=True, auto_close_enabled=False, working_hours=DEFAULT_WORKING_HOURS)
    )


@pytest.fixture
def order_sink() -> FakeOrderSink:
    return FakeOrderSink()


@pytest.fixture
def rates() -> ExchangeRates:
    return ExchangeRates({"CAD": Decimal("0.04")})


@pytest.fixture
def fake_db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def app(catalog, ledger, store_status, order_sink, rates, fake_db):
    from services.ordering_service.app.main import create_app

    app = create_app()
    app.dependency_overrides[get_async_db] = lambda: fake_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_points_ledger] = lambda: ledger
    app.dependency_overrides[get_store_status_source] = lambda: store_status
    app.dependency_overrides[get_order_sink] = lambda: order_sink
    app.dependency_overrides[get_exchange_rates] = lambda: rates
    app.dependency_overrides[get_earning_rule] = lambda: (Decimal("5"), Decimal("50"))
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_store_tz] = lambda: STORE_TZ
    app.dependency_overrides[get_current_user] = lambda: make_user()
    app.dependency_overrides[get_optional_user] = lambda: make_user()
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

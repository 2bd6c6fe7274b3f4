"""Unit tests for the customization selector."""

from decimal import Decimal

import pytest
from services.ordering_service.customization import (
    CapacityExceeded,
    CategoryWithOptions,
    CustomizationSelector,
    CustomizationSnapshot,
)
from tests.factories import OptionCategoryFactory, OptionFactory


@pytest.fixture
def capped():
    category = OptionCategoryFactory.create(id="extras", max_selections=2)
    x = OptionFactory.create(category, id="x", name="Cheddar", price=Decimal("10.00"))
    y = OptionFactory.create(category, id="y", name="Bacon", price=Decimal("15.00"))
    z = OptionFactory.create(category, id="z", name="Egg", price=Decimal("8.50"))
    return category, x, y, z


@pytest.mark.unit
def test_cap_rejects_then_deselect_frees_capacity(capped):
    category, x, y, z = capped
    selector = CustomizationSelector()

    assert selector.toggle(category, x).accepted
    assert selector.toggle(category, y).accepted

    rejected = selector.toggle(category, z)
    assert isinstance(rejected.rejection, CapacityExceeded)
    assert rejected.rejection.cap == 2
    assert rejected.rejection.category == category
    assert not selector.is_selected("z")
    assert selector.count_in_category("extras") == 2

    assert selector.toggle(category, x).accepted
    assert not selector.is_selected("x")

    assert selector.toggle(category, z).accepted
    assert {s.option.id for s in selector.selections} == {"y", "z"}


@pytest.mark.unit
def test_toggle_twice_restores_state_and_price(capped):
    category, x, y, _ = capped
    selector = CustomizationSelector()
    selector.toggle(category, y)
    before = (selector.selections, selector.extra_unit_price())

    selector.toggle(category, x)
    assert selector.extra_unit_price() == Decimal("25.00")
    selector.toggle(category, x)

    assert (selector.selections, selector.extra_unit_price()) == before


@pytest.mark.unit
def test_uncapped_category_accepts_every_option():
    category = OptionCategoryFactory.create(max_selections=None)
    options = [OptionFactory.create(category, id=f"opt-{i}") for i in range(6)]
    selector = CustomizationSelector()

    results = [selector.toggle(category, opt) for opt in options]

    assert all(r.accepted for r in results)
    assert len(selector.selections) == 6


@pytest.mark.unit
def test_caps_are_counted_per_category():
    sauces = OptionCategoryFactory.create(id="sauces", max_selections=1)
    extras = OptionCategoryFactory.create(id="extras", max_selections=1)
    ketchup = OptionFactory.create(sauces, id="ketchup", price=Decimal("0"))
    cheese = OptionFactory.create(extras, id="cheese")
    selector = CustomizationSelector()

    assert selector.toggle(sauces, ketchup).accepted
    assert selector.toggle(extras, cheese).accepted


@pytest.mark.unit
def test_extra_unit_price_is_zero_when_empty():
    assert CustomizationSelector().extra_unit_price() == Decimal("0")


@pytest.mark.unit
def test_option_from_another_category_is_a_programming_error(capped):
    category, _, _, _ = capped
    other = OptionCategoryFactory.create(id="other")
    stray = OptionFactory.create(other, id="stray")
    selector = CustomizationSelector()

    with pytest.raises(ValueError):
        selector.toggle(category, stray)


@pytest.mark.unit
def test_snapshots_keep_selection_order_and_prices(capped):
    category, x, _, z = capped
    selector = CustomizationSelector()
    selector.toggle(category, z)
    selector.toggle(category, x)

    snapshots = selector.to_customization_snapshots()

    assert snapshots == [
        CustomizationSnapshot(option_id="z", option_name="Egg", option_price=Decimal("8.50")),
        CustomizationSnapshot(option_id="x", option_name="Cheddar", option_price=Decimal("10.00")),
    ]


@pytest.mark.unit
def test_missing_required_lists_unanswered_required_categories():
    size = OptionCategoryFactory.create(id="size", name="Boy", is_required=True)
    extras = OptionCategoryFactory.create(id="extras", is_required=False)
    large = OptionFactory.create(size, id="large")
    categories = [
        CategoryWithOptions(category=size, options=(large,)),
        CategoryWithOptions(category=extras, options=()),
    ]
    selector = CustomizationSelector()

    assert selector.missing_required(categories) == [size]

    selector.toggle(size, large)
    assert selector.missing_required(categories) == []


@pytest.mark.unit
def test_option_category_rejects_non_positive_cap():
    with pytest.raises(ValueError):
        OptionCategoryFactory.create(max_selections=0)


@pytest.mark.unit
def test_display_name_prefers_english_when_available():
    category = OptionCategoryFactory.create(name="Soslar", name_en="Sauces")

    assert category.display_name("en-US") == "Sauces"
    assert category.display_name("tr") == "Soslar"

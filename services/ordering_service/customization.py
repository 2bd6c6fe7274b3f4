"""Product customization: option categories, options and the selection state.

Categories and options arrive from the catalog boundary already validated
(see ``services.catalog_ops``). The selector only enforces the per-category
cap and option uniqueness; it does not care where options come from, so
"remove ingredient" categories built from a product's ingredient list are
treated like any other category.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.rejections import Rejection
from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# CATALOG SHAPES
# ============================================================================


class OptionCategory(BaseModel):
    """A named group of add-ons or removals, e.g. "Extra Ingredients"."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    name_en: Optional[str] = None
    description: Optional[str] = None
    max_selections: Optional[int] = Field(None, ge=1)
    is_required: bool = False
    display_order: int = 0

    def display_name(self, language: Optional[str] = None) -> str:
        if language and language.lower().startswith("en") and self.name_en:
            return self.name_en
        return self.name


class Option(BaseModel):
    """A selectable item inside a category, with its extra unit price."""

    model_config = ConfigDict(frozen=True)

    id: str
    category_id: str
    name: str
    name_en: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    display_order: int = 0

    def display_name(self, language: Optional[str] = None) -> str:
        if language and language.lower().startswith("en") and self.name_en:
            return self.name_en
        return self.name


class CategoryWithOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: OptionCategory
    options: tuple[Option, ...] = ()

    def find_option(self, option_id: str) -> Optional[Option]:
        return next((opt for opt in self.options if opt.id == option_id), None)


@dataclass(frozen=True)
class SelectedCustomization:
    option: Option
    category: OptionCategory


@dataclass(frozen=True)
class CustomizationSnapshot:
    """Price-affecting record of a selection, frozen at add-to-cart time."""

    option_id: str
    option_name: str
    option_price: Decimal


# ============================================================================
# SELECTION RESULTS
# ============================================================================


@dataclass(frozen=True)
class CapacityExceeded(Rejection):
    category: OptionCategory
    cap: int

    code = "capacity_exceeded"

    @property
    def message(self) -> str:
        return f"You can choose at most {self.cap} option(s) from {self.category.name}"


@dataclass(frozen=True)
class SelectionResult:
    selections: tuple[SelectedCustomization, ...]
    rejection: Optional[CapacityExceeded] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


# ============================================================================
# SELECTOR
# ============================================================================


class CustomizationSelector:
    """Selection state for configuring one product, keyed by option id."""

    def __init__(self) -> None:
        self._selected: dict[str, SelectedCustomization] = {}

    @property
    def selections(self) -> tuple[SelectedCustomization, ...]:
        return tuple(self._selected.values())

    def is_selected(self, option_id: str) -> bool:
        return option_id in self._selected

    def count_in_category(self, category_id: str) -> int:
        return sum(1 for sel in self._selected.values() if sel.category.id == category_id)

    def toggle(self, category: OptionCategory, option: Option) -> SelectionResult:
        """Select ``option`` or, if it is already selected, deselect it."""
        if option.category_id != category.id:
            raise ValueError(
                f"Option {option.id} belongs to category {option.category_id}, not {category.id}"
            )

        if option.id in self._selected:
            del self._selected[option.id]
            return SelectionResult(self.selections)

        cap = category.max_selections
        if cap is not None and self.count_in_category(category.id) >= cap:
            return SelectionResult(self.selections, CapacityExceeded(category, cap))

        self._selected[option.id] = SelectedCustomization(option=option, category=category)
        return SelectionResult(self.selections)

    def extra_unit_price(self) -> Decimal:
        return sum((sel.option.price for sel in self._selected.values()), Decimal("0"))

    def to_customization_snapshots(self) -> list[CustomizationSnapshot]:
        return [
            CustomizationSnapshot(
                option_id=sel.option.id,
                option_name=sel.option.name,
                option_price=sel.option.price,
            )
            for sel in self._selected.values()
        ]

    def missing_required(self, categories: Iterable[CategoryWithOptions]) -> list[OptionCategory]:
        """Required categories the user has not picked anything from yet."""
        return [
            entry.category
            for entry in categories
            if entry.category.is_required and self.count_in_category(entry.category.id) == 0
        ]

    def clear(self) -> None:
        self._selected.clear()

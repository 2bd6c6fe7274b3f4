"""Currency conversion and price formatting.

Internal storage unit: the base currency (Turkish Lira). Every stored amount
and every calculation is in TRY; other currencies exist only for display.

Conversion chain
----------------
X → TRY : amount ÷ rate(X)
TRY → Y : amount × rate(Y)

The rate table is owned by an ``ExchangeRates`` instance created once per
process (see ``services.ordering_service.app.main``) and swapped atomically
on update, so readers never observe a half-applied change.

Each worker process holds its own table. An admin update reaches the worker
that handled it; the others pick up the persisted rates on their next start.
"""

from __future__ import annotations

import enum
import math
import threading
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Union

from libs.common.logging import get_logger
from libs.common.rejections import Rejection

logger = get_logger(__name__)

Money = Decimal

TWO_PLACES = Decimal("0.01")


class Currency(str, enum.Enum):
    TRY = "TRY"
    CAD = "CAD"


BASE_CURRENCY = Currency.TRY


@dataclass(frozen=True)
class CurrencyInfo:
    code: Currency
    symbol: str
    name: str
    name_tr: str


CURRENCIES: Mapping[Currency, CurrencyInfo] = MappingProxyType(
    {
        Currency.TRY: CurrencyInfo(Currency.TRY, "₺", "Turkish Lira", "Türk Lirası"),
        Currency.CAD: CurrencyInfo(Currency.CAD, "$", "Canadian Dollar", "Kanada Doları"),
    }
)


def currency_for_language(language: Optional[str]) -> Currency:
    """Display currency follows the app language: Turkish → TRY, otherwise CAD."""
    if language and language.lower().startswith("tr"):
        return Currency.TRY
    return Currency.CAD


def format_amount(amount: Money, currency: Currency, with_symbol: bool = True) -> str:
    """Render ``amount`` (already in ``currency``) with exactly two decimals."""
    text = f"{Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP):.2f}"
    if with_symbol:
        return f"{CURRENCIES[currency].symbol}{text}"
    return text


# ---------------------------------------------------------------------------
# Rate table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvalidRate(Rejection):
    """Attempted to set a rate that cannot be used. The old table is kept."""

    currency: Currency
    rate: object
    reason: str

    code = "invalid_rate"

    @property
    def message(self) -> str:
        return f"Invalid rate {self.rate!r} for {self.currency.value}: {self.reason}"


@dataclass(frozen=True)
class RateTable:
    """Immutable snapshot of rates relative to the base currency."""

    rates: Mapping[Currency, Decimal]

    @classmethod
    def build(cls, rates: Mapping[Union[Currency, str], object]) -> "RateTable":
        table = {currency: Decimal(1) for currency in Currency}
        for code, value in rates.items():
            currency = Currency(code)
            if currency == BASE_CURRENCY:
                continue
            rate = _as_rate(value)
            if rate is None:
                raise ValueError(f"Invalid rate {value!r} for {currency.value}")
            table[currency] = rate
        return cls(rates=MappingProxyType(table))

    def rate(self, currency: Currency) -> Decimal:
        return self.rates[Currency(currency)]

    def with_rate(self, currency: Currency, rate: object) -> Union["RateTable", InvalidRate]:
        """Return a copy with one rate replaced, or ``InvalidRate``."""
        currency = Currency(currency)
        if currency == BASE_CURRENCY:
            return InvalidRate(currency, rate, "base currency rate is fixed at 1")
        new_rate = _as_rate(rate)
        if new_rate is None:
            return InvalidRate(currency, rate, "rate must be a positive number")
        rates = dict(self.rates)
        rates[currency] = new_rate
        return RateTable(rates=MappingProxyType(rates))

    def as_dict(self) -> dict[str, str]:
        return {currency.value: str(rate) for currency, rate in self.rates.items()}


def _as_rate(value: object) -> Optional[Decimal]:
    """Return ``value`` as a positive finite Decimal, or None."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        rate = Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        return None
    if not rate.is_finite() or rate <= 0:
        return None
    return rate


class ExchangeRates:
    """Process-wide exchange rate service.

    Reads take one reference to the current ``RateTable`` and work on it;
    ``set_rate`` builds a new table and replaces the reference in a single
    assignment. Writers are serialized so concurrent updates are not lost.
    """

    def __init__(self, rates: Optional[Mapping[Union[Currency, str], object]] = None):
        self._table = RateTable.build(rates or {})
        self._write_lock = threading.Lock()

    @property
    def table(self) -> RateTable:
        return self._table

    def rate(self, currency: Currency) -> Decimal:
        return self._table.rate(currency)

    def convert(self, amount: Money, from_currency: Currency, to_currency: Currency) -> Money:
        from_currency = Currency(from_currency)
        to_currency = Currency(to_currency)
        if from_currency == to_currency:
            return amount

        table = self._table
        amount_in_base = Decimal(amount)
        if from_currency != BASE_CURRENCY:
            amount_in_base = amount_in_base / table.rate(from_currency)
        if to_currency == BASE_CURRENCY:
            return amount_in_base
        return amount_in_base * table.rate(to_currency)

    def format(self, amount: Money, currency: Currency, with_symbol: bool = True) -> str:
        return format_amount(amount, Currency(currency), with_symbol)

    def display(self, amount: Money, currency: Currency, with_symbol: bool = True) -> str:
        """Format a base-currency ``amount`` in ``currency`` at the current rate."""
        converted = self.convert(amount, BASE_CURRENCY, currency)
        return format_amount(converted, Currency(currency), with_symbol)

    def set_rate(self, currency: Currency, rate: object) -> Union[RateTable, InvalidRate]:
        """Replace one rate. Returns the new table, or ``InvalidRate``."""
        with self._write_lock:
            table = self._table.with_rate(currency, rate)
            if isinstance(table, InvalidRate):
                return table
            self._table = table

        currency = Currency(currency)
        logger.info("Exchange rate for %s set to %s", currency.value, table.rate(currency))
        return table

    def install(self, table: RateTable) -> RateTable:
        """Swap in an already validated table."""
        with self._write_lock:
            self._table = table
        return table

    def replace(self, rates: Mapping[Union[Currency, str], object]) -> RateTable:
        """Swap in a whole table (e.g. rates loaded from storage at startup)."""
        return self.install(RateTable.build(rates))

"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ordersaga.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Nothing is rounded: a
    product of a price and a quantity keeps every digit of the price.
    """

    amount: Decimal
    currency: str = "CNY"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __str__(self) -> str:
        # Two decimals at least, more when the amount has sub-cent digits.
        places = max(2, -self.amount.normalize().as_tuple().exponent)
        return f"{self.amount:.{places}f} {self.currency}"

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def zero(currency: str = "CNY") -> Money:
        return Money(Decimal("0"), currency)

    @staticmethod
    def of(amount: str | int | Decimal, currency: str = "CNY") -> Money:
        """Convenient factory that coerces to Decimal safely.

        Floats are refused: their binary value is already inexact.
        """
        if isinstance(amount, float):
            raise ValidationError(f"Money amount must not be a float: {amount!r}")
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StockItem:
    """A (product id, quantity) pair.

    Used both for what the buyer put in the cart and for what is asked
    of the inventory service when decrementing or restocking.
    """

    product_id: str
    quantity: Quantity

    @staticmethod
    def of(product_id: str, quantity: int) -> StockItem:
        if not product_id or not product_id.strip():
            raise ValidationError("Product id is required")
        return StockItem(product_id=product_id.strip(), quantity=Quantity(quantity))


def merge_items(items: list[StockItem]) -> list[StockItem]:
    """Collapse repeated product ids into one item, keeping first-seen order."""
    merged: dict[str, Quantity] = {}
    for item in items:
        if item.product_id in merged:
            merged[item.product_id] = merged[item.product_id] + item.quantity
        else:
            merged[item.product_id] = item.quantity
    return [StockItem(product_id=pid, quantity=qty) for pid, qty in merged.items()]


@dataclass(frozen=True)
class Buyer:
    """Who placed the order."""

    name: str
    phone: str = ""
    address: str = ""
    openid: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Buyer name is required")
        object.__setattr__(self, "name", self.name.strip())

# domain/calculator.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union
from .catalog import Catalog, Product
from .offer import Discount, OfferLine

BTW_RATE = Decimal("0.21")
CENT = Decimal("0.01")

Number = Union[int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """Decimal built from the shortest repr, so 1000.005 stays 1000.005."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    value = to_decimal(value)
    if not value.is_finite():
        return Decimal("0.00")
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_quantity(value: Number) -> int:
    """Nearest integer, halves rounded up. NaN and infinity give 0."""
    value = to_decimal(value)
    if not value.is_finite():
        return 0
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


@dataclass
class OfferTotals:
    """Totals of the standard (non post-event) part of an offer."""
    subtotal: float
    discount_amount: float
    discounted_subtotal: float
    btw_amount: float
    total: float


class TotalsCalculator:
    """Aggregates line totals into subtotal, discount, BTW and total."""

    def __init__(self, btw_rate: Union[Decimal, float] = BTW_RATE):
        self.btw_rate = to_decimal(btw_rate)

    @staticmethod
    def effective_quantity(line: OfferLine, product: Product, staffel: Number) -> Decimal:
        quantity = to_decimal(line.quantity or 0)
        if product.has_staffel:
            staffel = to_decimal(staffel) if staffel and staffel > 0 else Decimal(1)
            return quantity * staffel
        return quantity

    @staticmethod
    def line_total(line: OfferLine, product: Optional[Product], staffel: Number = 1) -> float:
        if product is None:
            return float(round_money(to_decimal(line.quantity or 0) * to_decimal(line.unit_price or 0)))
        qty = TotalsCalculator.effective_quantity(line, product, staffel)
        return float(round_money(qty * to_decimal(line.unit_price or 0)))

    def compute_totals(self, lines: Iterable[OfferLine], catalog: Catalog,
                       discount: Optional[Discount] = None, staffel: Number = 1) -> OfferTotals:
        discount = discount or Discount()

        # 1. Subtotal over standard lines only
        raw_subtotal = Decimal(0)
        for line in lines:
            product = catalog.product(line.product_id)
            if product is None or catalog.is_post_event(product.category):
                continue
            qty = self.effective_quantity(line, product, staffel)
            raw_subtotal += qty * to_decimal(line.unit_price or 0)
        subtotal = round_money(raw_subtotal)

        # 2. Discount, percentage wins over the absolute amount
        percentage = to_decimal(discount.percentage or 0)
        if percentage > 0:
            discount_amount = round_money(subtotal * percentage / Decimal(100))
        else:
            discount_amount = round_money(discount.amount or 0)
        discounted_subtotal = subtotal - discount_amount

        # 3. BTW and total, each rounded before use
        btw_amount = round_money(discounted_subtotal * self.btw_rate)
        total = round_money(discounted_subtotal + btw_amount)

        return OfferTotals(
            subtotal=float(subtotal),
            discount_amount=float(discount_amount),
            discounted_subtotal=float(discounted_subtotal),
            btw_amount=float(btw_amount),
            total=float(total),
        )

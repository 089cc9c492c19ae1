"""
Cálculo de precios de una orden.

    subtotal  = Σ price × quantity
    descuento = subtotal × %descuento / 100
    propina   = subtotal × %propina / 100   (sobre el subtotal, no el neto)
    total     = subtotal − descuento + propina

No se redondea ni se recorta dentro del cálculo: el total crudo es el que se
guarda. `display_total` y `change_due` recortan a cero sólo para mostrar.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from cafeapp.core.schemas import DiscountType, OrderItem

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DISCOUNT_PERCENT = {
    DiscountType.NONE: Decimal("0"),
    DiscountType.SENIOR: Decimal("20"),
    DiscountType.PWD: Decimal("20"),
    DiscountType.EMPLOYEE: Decimal("10"),
}


@dataclass(frozen=True)
class Pricing:
    subtotal: Decimal
    discount_amount: Decimal
    tip_amount: Decimal
    total: Decimal


def dec(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))


def discount_percent(discount_type: DiscountType) -> Decimal:
    return DISCOUNT_PERCENT[DiscountType(discount_type)]


def price(items: Iterable[OrderItem], discount_type: DiscountType, tip_percent) -> Pricing:
    subtotal = sum((dec(it.price) * it.quantity for it in items), ZERO)
    discount_amount = subtotal * discount_percent(discount_type) / HUNDRED
    tip_amount = subtotal * dec(tip_percent) / HUNDRED
    total = subtotal - discount_amount + tip_amount
    return Pricing(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tip_amount=tip_amount,
        total=total,
    )


def display_total(total: Decimal) -> Decimal:
    return max(total, ZERO)


def change_due(cash_given: Optional[Decimal], total: Decimal) -> Decimal:
    if cash_given is None:
        return ZERO
    return max(dec(cash_given) - total, ZERO)


def covers(cash_given: Optional[Decimal], total: Decimal) -> bool:
    return cash_given is not None and dec(cash_given) >= total

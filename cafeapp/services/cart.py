from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from cafeapp.services import pricing


@dataclass
class CartLine:
    product_id: str
    name: str
    price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """Carrito del POS en memoria; el orden de las líneas es el orden en que se agregaron."""

    def __init__(self):
        self._lines: "OrderedDict[str, CartLine]" = OrderedDict()

    def add(self, product_id: str, name: str, price, quantity: int = 1) -> CartLine:
        line = self._lines.get(product_id)
        if line:
            line.quantity += quantity
        else:
            line = CartLine(product_id, name, pricing.dec(price), quantity)
            self._lines[product_id] = line
        return line

    def change_quantity(self, product_id: str, delta: int) -> CartLine:
        line = self._lines[product_id]
        line.quantity = max(1, line.quantity + delta)
        return line

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def __contains__(self, product_id) -> bool:
        return product_id in self._lines

    def __len__(self) -> int:
        return len(self._lines)

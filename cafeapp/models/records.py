"""
Registros tipados que viven en el document store.

Todo documento se valida al entrar y al salir del store (`from_doc` /
`to_doc`); un documento que no cumple el esquema o los invariantes se rechaza
con InvalidDocument en lugar de circular con campos arbitrarios.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from cafeapp.core.errors import InvalidDocument
from cafeapp.core.schemas import (
    CustomerRef,
    DiscountType,
    OrderItem,
    OrderSource,
    OrderStatus,
    PaymentType,
)
from cafeapp.services import pricing


class Record(BaseModel):
    @classmethod
    def from_doc(cls, doc: Dict[str, Any]):
        try:
            return cls.model_validate(doc)
        except ValidationError as e:
            raise InvalidDocument(f"{cls.__name__}: {e.errors()[0].get('msg')}")

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class Order(Record):
    id: str = Field(..., pattern=r"^(POS|O)-\d+$")
    source: OrderSource
    items: List[OrderItem] = Field(..., min_length=1)
    customer: CustomerRef = Field(default_factory=CustomerRef)
    subtotal: Decimal = Field(..., ge=0)
    discount_type: DiscountType = DiscountType.NONE
    discount_amount: Decimal = Field(..., ge=0)
    tip_percent: Decimal = Field(default=Decimal("0"), ge=0)
    tip_amount: Decimal = Field(..., ge=0)
    total: Decimal
    payment_type: PaymentType
    cash_given: Optional[Decimal] = None
    status: OrderStatus
    placed_at: datetime
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    handled_by: Optional[str] = None

    @model_validator(mode="after")
    def _check_invariants(self):
        p = pricing.price(self.items, self.discount_type, self.tip_percent)
        if (p.subtotal, p.discount_amount, p.tip_amount, p.total) != (
            self.subtotal,
            self.discount_amount,
            self.tip_amount,
            self.total,
        ):
            raise ValueError("pricing does not match items")
        if self.total < 0:
            raise ValueError("total must not be negative")
        prefix = "POS-" if self.source == OrderSource.POS else "O-"
        if not self.id.startswith(prefix):
            raise ValueError(f"{self.source.value} order id must start with {prefix}")
        if self.cash_given is not None and self.payment_type != PaymentType.CASH:
            raise ValueError("cash_given only applies to Cash payments")
        if self.status == OrderStatus.COMPLETED:
            if self.completed_at is None:
                raise ValueError("completed order without completed_at")
            if self.payment_type == PaymentType.CASH and not pricing.covers(
                self.cash_given, self.total
            ):
                raise ValueError("cash given does not cover total")
        return self

    @classmethod
    def build(
        cls,
        *,
        order_id: str,
        source: OrderSource,
        items: List[OrderItem],
        customer: CustomerRef,
        discount_type: DiscountType,
        tip_percent,
        payment_type: PaymentType,
        cash_given,
        status: OrderStatus,
        placed_at: datetime,
        handled_by: Optional[str] = None,
    ) -> "Order":
        p = pricing.price(items, discount_type, tip_percent)
        return cls(
            id=order_id,
            source=source,
            items=items,
            customer=customer,
            subtotal=p.subtotal,
            discount_type=discount_type,
            discount_amount=p.discount_amount,
            tip_percent=pricing.dec(tip_percent),
            tip_amount=p.tip_amount,
            total=p.total,
            payment_type=payment_type,
            cash_given=cash_given if payment_type == PaymentType.CASH else None,
            status=status,
            placed_at=placed_at,
            completed_at=placed_at if status == OrderStatus.COMPLETED else None,
            handled_by=handled_by,
        )

    @property
    def change(self) -> Optional[Decimal]:
        if self.payment_type != PaymentType.CASH or self.cash_given is None:
            return None
        return pricing.change_due(self.cash_given, self.total)


class InventoryItem(Record):
    id: str = Field(..., min_length=1)
    item: str = Field(..., min_length=1)
    category: str
    unit: str
    stock: int = Field(..., ge=0)
    reorder_level: int = Field(..., ge=0)

    @property
    def low_stock(self) -> bool:
        return self.stock < self.reorder_level


def _all_methods() -> Dict[PaymentType, bool]:
    return {m: True for m in PaymentType}


class StorePreferences(Record):
    store_name: str
    currency: str
    online_ordering: bool = True
    min_order: Decimal = Field(default=Decimal("0"), ge=0)
    payment_methods: Dict[PaymentType, bool] = Field(default_factory=_all_methods)
    tip_presets: List[Decimal] = Field(
        default_factory=lambda: [Decimal("0"), Decimal("5"), Decimal("10")]
    )
    receipt_header: str = ""
    receipt_footer: str = ""

    def accepts(self, method: PaymentType) -> bool:
        return self.payment_methods.get(PaymentType(method), True)

from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class OrderSource(str, Enum):
    POS = "POS"
    ONLINE = "Online"


class DiscountType(str, Enum):
    NONE = "None"
    SENIOR = "Senior"
    PWD = "PWD"
    EMPLOYEE = "Employee"


class PaymentType(str, Enum):
    CASH = "Cash"
    CARD = "Card"
    GCASH = "GCash"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    READY = "Ready"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class StaffAction(str, Enum):
    ACCEPT = "accept"
    READY = "ready"
    COMPLETE = "complete"
    CANCEL = "cancel"


WALK_IN = "walk-in"


class OrderItem(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)


class CustomerRef(BaseModel):
    name: str = "Walk-in"
    id: str = WALK_IN


# ====== Request bodies ======
class LoginIn(BaseModel):
    user_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    role: str = "staff"


class CartAddIn(BaseModel):
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)


class CartQtyIn(BaseModel):
    product_id: str
    delta: int


class QuoteIn(BaseModel):
    discount_type: DiscountType = DiscountType.NONE
    tip_percent: Decimal = Field(default=Decimal("0"), ge=0)
    cash_given: Optional[Decimal] = Field(default=None, ge=0, allow_inf_nan=False)


class CheckoutIn(QuoteIn):
    payment_type: PaymentType = PaymentType.CASH
    customer_name: Optional[str] = None


class ActionIn(BaseModel):
    # sólo `complete` de una orden Cash lo usa
    cash_given: Optional[Decimal] = Field(default=None, ge=0, allow_inf_nan=False)


class OnlineOrderIn(BaseModel):
    items: List[OrderItem] = Field(..., min_length=1)
    customer: CustomerRef
    payment_type: PaymentType = PaymentType.GCASH
    discount_type: DiscountType = DiscountType.NONE
    tip_percent: Decimal = Field(default=Decimal("0"), ge=0)
    cash_given: Optional[Decimal] = Field(default=None, ge=0, allow_inf_nan=False)


class InventoryItemIn(BaseModel):
    item: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)
    stock: int = Field(..., ge=0)
    reorder_level: int = Field(..., ge=0)


class StockAdjustIn(BaseModel):
    delta: int


class PreferencesIn(BaseModel):
    store_name: Optional[str] = None
    currency: Optional[str] = None
    online_ordering: Optional[bool] = None
    min_order: Optional[Decimal] = Field(default=None, ge=0)
    payment_methods: Optional[Dict[PaymentType, bool]] = None
    tip_presets: Optional[List[Decimal]] = None
    receipt_header: Optional[str] = None
    receipt_footer: Optional[str] = None

from fastapi import APIRouter, Depends, HTTPException

from cafeapp.core.context import StaffSession
from cafeapp.core.errors import CafeError
from cafeapp.core.schemas import CartAddIn, CartQtyIn, CheckoutIn, QuoteIn
from cafeapp.deps import current_session, get_order_service, get_preferences, http_error
from cafeapp.routers.orders import serialize_order
from cafeapp.services import pricing
from cafeapp.services.orders import OrderService
from cafeapp.services.repository import PreferencesRepository

router = APIRouter(prefix="/pos", tags=["pos"])


def _serialize_cart(session: StaffSession) -> dict:
    lines = session.cart.lines()
    return {
        "count": sum(l.quantity for l in lines),
        "lines": [
            {"product_id": l.product_id, "name": l.name, "price": float(l.price),
             "quantity": l.quantity, "line_total": float(l.line_total)}
            for l in lines
        ],
    }


# ---------- CART ----------
@router.get("/cart")
def get_cart(session: StaffSession = Depends(current_session)):
    return _serialize_cart(session)


@router.post("/cart/add")
def add_to_cart(payload: CartAddIn, session: StaffSession = Depends(current_session)):
    session.cart.add(payload.product_id, payload.name, payload.price, payload.quantity)
    return _serialize_cart(session)


@router.post("/cart/qty")
def change_qty(payload: CartQtyIn, session: StaffSession = Depends(current_session)):
    if payload.product_id not in session.cart:
        raise HTTPException(status_code=404, detail="product not in cart")
    session.cart.change_quantity(payload.product_id, payload.delta)
    return _serialize_cart(session)


@router.delete("/cart/{product_id}")
def remove_from_cart(product_id: str, session: StaffSession = Depends(current_session)):
    session.cart.remove(product_id)
    return _serialize_cart(session)


@router.post("/cart/clear")
def clear_cart(session: StaffSession = Depends(current_session)):
    session.cart.clear()
    return _serialize_cart(session)


# ---------- QUOTE ----------
@router.post("/quote")
def quote(
    payload: QuoteIn,
    session: StaffSession = Depends(current_session),
    prefs: PreferencesRepository = Depends(get_preferences),
):
    p = pricing.price(session.cart.lines(), payload.discount_type, payload.tip_percent)
    covered = pricing.covers(payload.cash_given, p.total)
    return {
        "subtotal": float(p.subtotal),
        "discount_type": payload.discount_type.value,
        "discount_percent": float(pricing.discount_percent(payload.discount_type)),
        "discount_amount": float(p.discount_amount),
        "tip_amount": float(p.tip_amount),
        "total": float(p.total),
        "display_total": float(pricing.display_total(p.total)),
        "cash_given": float(payload.cash_given) if payload.cash_given is not None else None,
        "change": float(pricing.change_due(payload.cash_given, p.total)),
        "cash_covers_total": covered,
        "tip_presets": [float(t) for t in prefs.get().tip_presets],
    }


# ---------- CHECKOUT ----------
@router.post("/checkout")
def checkout(
    payload: CheckoutIn,
    session: StaffSession = Depends(current_session),
    svc: OrderService = Depends(get_order_service),
):
    try:
        o = svc.checkout_pos(
            session.cart.lines(),
            discount_type=payload.discount_type,
            tip_percent=payload.tip_percent,
            payment_type=payload.payment_type,
            cash_given=payload.cash_given,
            customer_name=payload.customer_name,
            staff=session.display_name,
        )
    except CafeError as e:
        raise http_error(e)
    # el carrito sólo se vacía cuando la venta quedó guardada
    session.cart.clear()
    return serialize_order(o)

"""
Errores de dominio de los servicios de órdenes.

Cada error lleva un `code` estable (se expone como detail.code) y el status
HTTP con el que responden los routers. Aquí no se reintenta nada: una
operación fallida deja el registro guardado sin cambios.
"""


class CafeError(Exception):
    code = "cafe_error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def as_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class EmptyCart(CafeError):
    code = "empty_cart"
    status_code = 422


class InsufficientCash(CafeError):
    code = "insufficient_cash"
    status_code = 422


class InvalidTransition(CafeError):
    code = "invalid_transition"
    status_code = 409


class PaymentMethodDisabled(CafeError):
    code = "payment_method_disabled"
    status_code = 409


class OnlineOrderingClosed(CafeError):
    code = "online_ordering_closed"
    status_code = 409


class BelowMinimumOrder(CafeError):
    code = "below_minimum_order"
    status_code = 422


class OrderNotFound(CafeError):
    code = "order_not_found"
    status_code = 404


class DocumentNotFound(CafeError):
    code = "document_not_found"
    status_code = 404


class InvalidDocument(CafeError):
    code = "invalid_document"
    status_code = 500


class StoreWriteFailed(CafeError):
    code = "store_write_failed"
    status_code = 503


class ConcurrentUpdate(StoreWriteFailed):
    code = "concurrent_update"
    status_code = 409


class SessionRequired(CafeError):
    code = "session_required"
    status_code = 401

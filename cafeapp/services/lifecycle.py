"""
Máquina de estados de la orden.

    Pending --accept--> Preparing --ready--> Ready --complete--> Completed
    Pending | Preparing | Ready --cancel--> Cancelled

Completed y Cancelled son terminales. Todo cambio de estado pasa por
`transition`; la escritura la hace el caller sólo si la validación pasa.
"""
from cafeapp.core.errors import InvalidTransition
from cafeapp.core.schemas import OrderStatus, StaffAction

TRANSITIONS = {
    (OrderStatus.PENDING, StaffAction.ACCEPT): OrderStatus.PREPARING,
    (OrderStatus.PREPARING, StaffAction.READY): OrderStatus.READY,
    (OrderStatus.READY, StaffAction.COMPLETE): OrderStatus.COMPLETED,
    (OrderStatus.PENDING, StaffAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PREPARING, StaffAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.READY, StaffAction.CANCEL): OrderStatus.CANCELLED,
}

TERMINAL = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


def is_terminal(status) -> bool:
    return OrderStatus(status) in TERMINAL


def allowed_actions(status) -> list:
    status = OrderStatus(status)
    return [action for (src, action) in TRANSITIONS if src == status]


def transition(current, action) -> OrderStatus:
    try:
        current = OrderStatus(current)
        action = StaffAction(action)
    except ValueError:
        raise InvalidTransition(f"unknown status/action: {current!r} / {action!r}")

    new_status = TRANSITIONS.get((current, action))
    if new_status is None:
        raise InvalidTransition(f"cannot {action.value} an order in status {current.value}")
    return new_status

import threading
import time


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class OrderIdSource:
    """
    Genera ids `<PREFIJO>-<dígitos>` a partir del reloj en milisegundos.
    Dentro del proceso son estrictamente crecientes: si dos pedidos caen en el
    mismo milisegundo el segundo toma el siguiente número.
    """

    def __init__(self, prefix: str, clock_ms=_now_ms):
        self.prefix = prefix
        self._clock_ms = clock_ms
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            n = max(int(self._clock_ms()), self._last + 1)
            self._last = n
        return f"{self.prefix}-{n}"


POS_IDS = OrderIdSource("POS")
ONLINE_IDS = OrderIdSource("O")
INVENTORY_IDS = OrderIdSource("INV")

from support_reply.domain.orders import OrderLookup, OrderSnapshot


class SimulatorOrderLookup(OrderLookup):
    """
    In-memory fake for testing. No mocking framework needed.

    Seed with add_order(); set fail=True to make every lookup raise, the
    way an unreachable storefront would.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self._orders: list[tuple[str, OrderSnapshot]] = []

    def add_order(self, customer_email: str, order: OrderSnapshot) -> None:
        self._orders.append((customer_email.lower(), order))

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("order lookup unavailable")

    def find_by_email(self, email: str) -> list[OrderSnapshot]:
        self._check()
        matches = [o for e, o in self._orders if e == email.lower()]
        return sorted(matches, key=lambda o: o.processed_at, reverse=True)

    def find_by_number(self, order_number: str) -> OrderSnapshot | None:
        self._check()
        wanted = order_number.lstrip("#")
        for _, order in self._orders:
            if order.order_number == wanted:
                return order
        return None

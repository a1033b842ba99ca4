"""
OrderLookup port: order data from the commerce backend.

The core only reads these records.  Lookup failures are the pipeline's
problem: it treats them as "no order data" and carries on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class LineItem:
    quantity: int
    title: str


@dataclass
class ShippingAddress:
    city: str = ""
    province: str = ""
    country: str = ""


@dataclass
class Fulfillment:
    tracking_company: str | None = None
    tracking_numbers: list[str] = field(default_factory=list)
    estimated_delivery_at: str | None = None   # ISO 8601


@dataclass
class OrderSnapshot:
    """One order as the storefront reports it."""
    order_number: str
    fulfillment_status: str       # e.g. "shipped", "FULFILLED", "pending"
    financial_status: str
    total_price: str
    items: list[LineItem] = field(default_factory=list)
    shipping_address: ShippingAddress | None = None
    fulfillments: list[Fulfillment] = field(default_factory=list)
    processed_at: str = ""        # ISO 8601


class OrderLookup(ABC):
    """
    Port: find a customer's orders.

    Implementations may query the Shopify Admin API (ShopifyOrderClient)
    or return injected records (SimulatorOrderLookup).
    """

    @abstractmethod
    def find_by_email(self, email: str) -> list[OrderSnapshot]:
        """All orders for a customer, most recent first."""
        ...

    @abstractmethod
    def find_by_number(self, order_number: str) -> OrderSnapshot | None:
        """A single order by its number, or None if not found."""
        ...

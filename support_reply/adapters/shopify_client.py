import logging

import requests

from support_reply.domain.orders import (
    Fulfillment,
    LineItem,
    OrderLookup,
    OrderSnapshot,
    ShippingAddress,
)

log = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-07"

_ORDER_FIELDS = """
  name
  processedAt
  displayFulfillmentStatus
  displayFinancialStatus
  totalPriceSet { shopMoney { amount currencyCode } }
  shippingAddress { city province country }
  lineItems(first: 10) { edges { node { title quantity } } }
  fulfillments(first: 5) {
    trackingInfo(first: 5) { company number }
    estimatedDeliveryAt
  }
"""

_ORDERS_QUERY = (
    "query findOrders($query: String!, $first: Int!) {\n"
    "  orders(first: $first, query: $query, sortKey: PROCESSED_AT, reverse: true) {\n"
    "    edges { node {" + _ORDER_FIELDS + "} }\n"
    "  }\n"
    "}"
)


class ShopifyError(Exception):
    """The Admin API answered, but with GraphQL errors."""


def _parse_order(node: dict) -> OrderSnapshot:
    money = (node.get("totalPriceSet") or {}).get("shopMoney") or {}
    total = f"{money.get('amount', '0.00')} {money.get('currencyCode', '')}".strip()

    address = node.get("shippingAddress")
    fulfillments = []
    for f in node.get("fulfillments") or []:
        tracking = f.get("trackingInfo") or []
        fulfillments.append(Fulfillment(
            tracking_company=tracking[0].get("company") if tracking else None,
            tracking_numbers=[t["number"] for t in tracking if t.get("number")],
            estimated_delivery_at=f.get("estimatedDeliveryAt"),
        ))

    return OrderSnapshot(
        order_number=node.get("name", "").lstrip("#"),
        fulfillment_status=node.get("displayFulfillmentStatus") or "UNFULFILLED",
        financial_status=node.get("displayFinancialStatus") or "",
        total_price=total,
        items=[
            LineItem(quantity=e["node"].get("quantity", 1), title=e["node"].get("title", ""))
            for e in (node.get("lineItems") or {}).get("edges", [])
        ],
        shipping_address=ShippingAddress(
            city=address.get("city") or "",
            province=address.get("province") or "",
            country=address.get("country") or "",
        ) if address else None,
        fulfillments=fulfillments,
        processed_at=node.get("processedAt") or "",
    )


class ShopifyOrderClient(OrderLookup):
    """Adapter: Shopify Admin GraphQL API over requests."""

    def __init__(self, shop_domain: str, access_token: str, api_version: str = DEFAULT_API_VERSION):
        self.url = f"https://{shop_domain}/admin/api/{api_version}/graphql.json"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            }
        )

    def _orders(self, search: str, first: int) -> list[OrderSnapshot]:
        resp = self.session.post(
            self.url,
            json={"query": _ORDERS_QUERY, "variables": {"query": search, "first": first}},
            timeout=30,
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("errors"):
            raise ShopifyError(str(data["errors"]))

        edges = ((data.get("data") or {}).get("orders") or {}).get("edges", [])
        return [_parse_order(e["node"]) for e in edges]

    def find_by_email(self, email: str) -> list[OrderSnapshot]:
        orders = self._orders(f"email:{email}", first=20)
        log.debug("shopify: %d order(s) for %s", len(orders), email)
        return orders

    def find_by_number(self, order_number: str) -> OrderSnapshot | None:
        name = order_number.lstrip("#")
        orders = self._orders(f"name:#{name}", first=1)
        return orders[0] if orders else None

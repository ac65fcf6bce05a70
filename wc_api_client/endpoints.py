"""Endpoint catalog for the store API.

Each method maps its arguments onto a path and hands off to
_make_api_call, which lives on the client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote, unquote

# name -> (method, path template); used for listing and documentation
ENDPOINTS: dict[str, tuple[str, str]] = {
    "get_index": ("GET", ""),
    "get_orders": ("GET", "orders"),
    "get_order": ("GET", "orders/{order_id}"),
    "get_orders_count": ("GET", "orders/count"),
    "get_order_notes": ("GET", "orders/{order_id}/notes"),
    "update_order": ("POST", "orders/{order_id}"),
    "delete_order": ("DELETE", "orders/{order_id}"),
    "get_coupons": ("GET", "coupons"),
    "get_coupon": ("GET", "coupons/{coupon_id}"),
    "get_coupons_count": ("GET", "coupons/count"),
    "get_coupon_by_code": ("GET", "coupons/code/{coupon_code}"),
    "get_customers": ("GET", "customers"),
    "get_customer": ("GET", "customers/{customer_id}"),
    "get_customer_by_email": ("GET", "customers/email/{email}"),
    "get_customers_count": ("GET", "customers/count"),
    "get_customer_orders": ("GET", "customers/{customer_id}/orders"),
    "get_products": ("GET", "products"),
    "get_product": ("GET", "products/{product_id}"),
    "get_products_count": ("GET", "products/count"),
    "get_product_reviews": ("GET", "products/{product_id}/reviews"),
    "get_reports": ("GET", "reports"),
    "get_sales_report": ("GET", "reports/sales"),
    "get_top_sellers_report": ("GET", "reports/sales/top_sellers"),
}


class EndpointsMixin(ABC):
    """Resource convenience methods over a host-supplied _make_api_call."""

    @abstractmethod
    def _make_api_call(
        self, endpoint: str, params: dict[str, Any] | None = None, method: str = "GET"
    ) -> Any:
        """Perform one call and return the formatted result."""

    def get_index(self) -> Any:
        return self._make_api_call("")

    # Orders

    def get_orders(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("orders", params)

    def get_order(self, order_id: int | str) -> Any:
        return self._make_api_call(f"orders/{order_id}")

    def get_orders_count(self) -> Any:
        return self._make_api_call("orders/count")

    def get_order_notes(self, order_id: int | str) -> Any:
        return self._make_api_call(f"orders/{order_id}/notes")

    def update_order(self, order_id: int | str, data: dict[str, Any] | None = None) -> Any:
        """Update an order. The store API only supports status updates."""
        return self._make_api_call(f"orders/{order_id}", data, "POST")

    def delete_order(self, order_id: int | str) -> Any:
        return self._make_api_call(f"orders/{order_id}", None, "DELETE")

    # Coupons

    def get_coupons(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("coupons", params)

    def get_coupon(self, coupon_id: int | str) -> Any:
        return self._make_api_call(f"coupons/{coupon_id}")

    def get_coupons_count(self) -> Any:
        return self._make_api_call("coupons/count")

    def get_coupon_by_code(self, coupon_code: str) -> Any:
        """Look up a coupon by code; the code may arrive already URL-encoded."""
        return self._make_api_call(f"coupons/code/{quote(unquote(coupon_code), safe='')}")

    # Customers

    def get_customers(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("customers", params)

    def get_customer(self, customer_id: int | str) -> Any:
        return self._make_api_call(f"customers/{customer_id}")

    def get_customer_by_email(self, email: str) -> Any:
        return self._make_api_call(f"customers/email/{email}")

    def get_customers_count(self) -> Any:
        return self._make_api_call("customers/count")

    def get_customer_orders(self, customer_id: int | str) -> Any:
        return self._make_api_call(f"customers/{customer_id}/orders")

    # Products

    def get_products(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("products", params)

    def get_product(self, product_id: int | str) -> Any:
        return self._make_api_call(f"products/{product_id}")

    def get_products_count(self) -> Any:
        return self._make_api_call("products/count")

    def get_product_reviews(self, product_id: int | str) -> Any:
        return self._make_api_call(f"products/{product_id}/reviews")

    # Reports

    def get_reports(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("reports", params)

    def get_sales_report(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("reports/sales", params)

    def get_top_sellers_report(self, params: dict[str, Any] | None = None) -> Any:
        return self._make_api_call("reports/sales/top_sellers", params)

    def make_custom_endpoint_call(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        method: str = "GET",
    ) -> Any:
        """Call an endpoint not in the catalog, e.g. one added by a store plugin."""
        return self._make_api_call(endpoint, params, method)

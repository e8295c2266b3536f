"""httpx-backed implementation of CartGateway for the store BFF.

Session handling mirrors what the Store API expects from a browser:
the nonce returned on every response is echoed back on the next request,
and session cookies live in the client's cookie jar.  Read-only GETs are
retried on transport errors; POST/DELETE are never retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from storefront.application.notifier import clean_error_message
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.app_config import AppConfig
from storefront.domain.model.cart import LineItem
from storefront.domain.model.remote_cart import AvailableCoupon, RemoteCart
from storefront.domain.repository.cart_gateway import CartGateway

logger = logging.getLogger(__name__)

NONCE_HEADER = "X-WC-Store-API-Nonce"
PAYMENT_METHOD_HEADER = "X-WC-Payment-Method"
API_KEY_HEADER = "X-API-Key"


class StoreApiClient(CartGateway):

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        token_provider: Callable[[], str | None] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._token_provider = token_provider
        self._nonce: str | None = None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
            event_hooks={
                "request": [self._on_request],
                "response": [self._on_response],
            },
        )

    @property
    def nonce(self) -> str | None:
        return self._nonce

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- CartGateway interface ------------------------------------------------

    async def get_cart(self, payment_hint: str | None = None) -> RemoteCart:
        data = await self._get("/store/cart", headers=_hint_headers(payment_hint))
        return RemoteCart.from_raw(data)

    async def sync_items(
        self, items: list[LineItem], payment_hint: str | None = None
    ) -> RemoteCart:
        payload = {"items": [_sync_line(line) for line in items]}
        data = await self._send(
            "POST", "/store/cart/sync", json=payload, headers=_hint_headers(payment_hint)
        )
        return RemoteCart.from_raw(data)

    async def update_customer(self, address: dict[str, str]) -> RemoteCart:
        payload = {"shipping_address": address, "billing_address": address}
        data = await self._send("POST", "/store/cart/update-customer", json=payload)
        return RemoteCart.from_raw(data)

    async def select_shipping_rate(self, rate_id: str) -> RemoteCart:
        data = await self._send(
            "POST", "/store/cart/select-shipping-rate", json={"rate_id": rate_id}
        )
        return RemoteCart.from_raw(data)

    async def apply_coupon(self, code: str) -> RemoteCart:
        data = await self._send("POST", "/store/cart/coupons", json={"code": code})
        return RemoteCart.from_raw(data)

    async def remove_coupon(self, code: str) -> RemoteCart:
        data = await self._send("DELETE", f"/store/cart/coupons/{quote(code, safe='')}")
        return RemoteCart.from_raw(data)

    async def list_coupons(self) -> list[AvailableCoupon]:
        data = await self._get("/store/coupons")
        return [AvailableCoupon.from_raw(raw) for raw in data or []]

    async def get_config(self) -> AppConfig:
        return AppConfig.from_raw(await self._get("/config"))

    # --- Transport ------------------------------------------------------------

    async def _get(self, path: str, headers: dict[str, str] | None = None) -> Any:
        try:
            response = await self._get_with_retry(path, headers or {})
        except httpx.HTTPStatusError as exc:
            raise _network_error(exc.response) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        return _json(response)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        wait=wait_exponential(multiplier=0.2, max=2) + wait_random(0, 0.2),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _get_with_retry(self, path: str, headers: dict[str, str]) -> httpx.Response:
        response = await self._client.get(path, headers=headers)
        response.raise_for_status()
        return response

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _network_error(exc.response) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        return _json(response)

    async def _on_request(self, request: httpx.Request) -> None:
        if self._api_key:
            request.headers[API_KEY_HEADER] = self._api_key
        token = self._token_provider() if self._token_provider else None
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        if self._nonce:
            request.headers[NONCE_HEADER] = self._nonce
        logger.info("API request: %s %s", request.method, request.url.path)

    async def _on_response(self, response: httpx.Response) -> None:
        nonce = response.headers.get(NONCE_HEADER) or response.headers.get("Nonce")
        if nonce:
            self._nonce = nonce
            logger.debug("Updated store nonce")


# --- Helpers ------------------------------------------------------------------


def _hint_headers(payment_hint: str | None) -> dict[str, str]:
    return {PAYMENT_METHOD_HEADER: payment_hint} if payment_hint else {}


def _sync_line(line: LineItem) -> dict[str, int]:
    item = {"product_id": line.product_id, "quantity": line.quantity.value}
    if line.variation_id is not None:
        item["variation_id"] = line.variation_id
    return item


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise NetworkError("Invalid response from server", response.status_code) from exc


def _network_error(response: httpx.Response) -> NetworkError:
    message = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
    if not message:
        message = f"Request failed with status {response.status_code}"
    logger.error("API error %s: %s", response.status_code, message)
    return NetworkError(clean_error_message(message), response.status_code)

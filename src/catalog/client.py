"""HTTP client for the shop's product catalog plugin API."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from src.models import CreatedProduct, CreateProductInput, Product

logger = logging.getLogger(__name__)

_API_PREFIX = "/wp-json/wsi/v1"
_PRODUCT_LIST = TypeAdapter(list[Product])


class CatalogErrorCode(str, Enum):
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


class CatalogApiError(Exception):
    """Raised when a catalog API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: CatalogErrorCode = CatalogErrorCode.UNKNOWN,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class CatalogApi(Protocol):
    async def list_products(self) -> list[Product]: ...

    async def create_product(self, data: CreateProductInput) -> CreatedProduct: ...


def error_code_for_status(status_code: int) -> CatalogErrorCode:
    if status_code == 401:
        return CatalogErrorCode.UNAUTHORIZED
    if status_code == 400:
        return CatalogErrorCode.BAD_REQUEST
    if status_code == 404:
        return CatalogErrorCode.NOT_FOUND
    if status_code >= 500:
        return CatalogErrorCode.SERVER_ERROR
    return CatalogErrorCode.UNKNOWN


class CatalogClient:
    """Calls the catalog plugin's REST endpoints with a Bearer token.

    No timeout is applied unless one is passed in; callers own that policy.
    """

    def __init__(
        self,
        shop_url: str,
        auth_token: str,
        timeout: float | None = None,
    ) -> None:
        self._base_url = f"{shop_url.rstrip('/')}{_API_PREFIX}"
        self._auth_token = auth_token
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._auth_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self, method: str, path: str, action: str, body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(
                    method, url, json=body, headers=self._headers(),
                )
        except httpx.TransportError as exc:
            logger.error("catalog_network_error action=%s error=%s", action, exc)
            raise CatalogApiError(
                f"Network error {action}", code=CatalogErrorCode.NETWORK_ERROR,
            ) from exc

    async def list_products(self) -> list[Product]:
        logger.info("catalog_list_products_start")
        resp = await self._request("GET", "/products", "fetching products")

        if resp.status_code >= 400:
            logger.error(
                "catalog_api_error status=%d body=%s", resp.status_code, resp.text,
            )
            raise CatalogApiError(
                f"Catalog API error: {resp.status_code}",
                resp.status_code,
                error_code_for_status(resp.status_code),
            )

        try:
            products = _PRODUCT_LIST.validate_python(resp.json())
        except (json.JSONDecodeError, ValidationError) as exc:
            raise CatalogApiError(
                "Invalid product list from catalog API", resp.status_code,
            ) from exc

        logger.info("catalog_list_products_success count=%d", len(products))
        return products

    async def create_product(self, data: CreateProductInput) -> CreatedProduct:
        logger.info("catalog_create_product_start name=%s", data.name)
        resp = await self._request(
            "POST", "/products", "creating product",
            body=data.model_dump(exclude_none=True),
        )

        if resp.status_code >= 400:
            logger.error(
                "catalog_api_error status=%d body=%s", resp.status_code, resp.text,
            )
            raise CatalogApiError(
                _error_message(resp, "Failed to create product"),
                resp.status_code,
                error_code_for_status(resp.status_code),
            )

        try:
            product = CreatedProduct.model_validate(resp.json())
        except (json.JSONDecodeError, ValidationError) as exc:
            raise CatalogApiError(
                "Invalid product from catalog API", resp.status_code,
            ) from exc

        logger.info("catalog_create_product_success product_id=%d", product.id)
        return product


def _error_message(resp: httpx.Response, fallback: str) -> str:
    """Prefer the API's own `message` field for user-facing errors."""
    try:
        body = resp.json()
    except json.JSONDecodeError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback

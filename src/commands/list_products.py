"""List-products command."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.catalog.client import CatalogApiError
from src.commands import formatter

if TYPE_CHECKING:
    from src.catalog.client import CatalogApi

logger = logging.getLogger(__name__)


class ListProductsFlow:
    """Fetches the catalog and renders it; API failures become a reply."""

    def __init__(self, catalog: CatalogApi) -> None:
        self._catalog = catalog

    async def execute(self) -> str:
        try:
            products = await self._catalog.list_products()
        except CatalogApiError as exc:
            logger.error("list_products_error code=%s error=%s", exc.code.value, exc)
            return formatter.format_list_error(str(exc))

        logger.info("list_products_fetched count=%d", len(products))
        return formatter.format_product_list(products)

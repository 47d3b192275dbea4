"""Catalog Service HTTP client.

Thin httpx adapter implementing ``CatalogService`` against the store's
admin REST API. It handles the ``{success, data}`` envelope, maps
JSON onto domain entities and turns every failure into a
``CatalogServiceError`` carrying the HTTP status (None when no
response was received). Classification is left to the coordinator.
"""

from typing import Any

import httpx
import pydantic
import structlog

from storeadmin.application.catalog_service import CatalogServiceError, CategoryListing
from storeadmin.domain.entities import Category, Product, SubCategory, Variant
from storeadmin.domain.exceptions import DomainError
from storeadmin.domain.requests import CategoryRequest, ProductRequest, VariantRequest
from storeadmin.domain.value_objects import CategoryId, ProductId, SubCategoryId, VariantId
from storeadmin.infrastructure.config import settings
from storeadmin.infrastructure.schemas import (
    CategorySchema,
    ProductSchema,
    SubCategorySchema,
    VariantListSchema,
    VariantSchema,
    category_payload,
    product_payload,
    variant_payload,
)

logger = structlog.get_logger()


class CatalogAPIClient:
    """HTTP client for the catalog endpoints of the admin API.

    Example usage:
        async with CatalogAPIClient.from_settings() as client:
            listing = await client.list_categories(include_disabled=True)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Admin API base URL.
            token: Bearer token, obtained elsewhere.
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls) -> "CatalogAPIClient":
        """Create a client from the environment settings."""
        return cls(
            base_url=settings.catalog_api_url,
            token=settings.catalog_api_token,
            timeout=settings.request_timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CatalogAPIClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request and unwrap the response envelope.

        Args:
            method: HTTP method.
            path: API endpoint path.
            json: Request body.
            params: Query parameters.

        Returns:
            The ``data`` member of an envelope, the bare JSON body, or
            None for empty responses.

        Raises:
            CatalogServiceError: On transport failure, non-2xx status or
                an envelope with ``success: false``.
        """
        client = await self._get_client()

        try:
            logger.debug("Catalog API request", method=method, path=path)
            response = await client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            logger.error("Catalog API timeout", method=method, path=path, error=str(e))
            raise CatalogServiceError(f"Request timed out: {path}") from e
        except httpx.RequestError as e:
            logger.error("Catalog API request failed", method=method, path=path, error=str(e))
            raise CatalogServiceError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                "Catalog API error",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise CatalogServiceError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Catalog API returned non-JSON body", method=method, path=path)
            raise CatalogServiceError(f"Malformed response from {path}: {e}", 502) from e
        if isinstance(body, dict) and "success" in body:
            if not body["success"]:
                raise CatalogServiceError(
                    body.get("message") or "Request was not successful",
                    response.status_code,
                )
            return body.get("data")
        return body

    async def _parse(self, path: str, parse: Any, data: Any) -> Any:
        try:
            return parse(data)
        except (pydantic.ValidationError, DomainError, TypeError, ArithmeticError) as e:
            logger.error("Malformed catalog response", path=path, error=str(e))
            raise CatalogServiceError(f"Malformed response from {path}: {e}", 502) from e

    # =========================================================================
    # Categories
    # =========================================================================

    async def list_categories(self, include_disabled: bool = False) -> CategoryListing:
        path = "/api/categories"
        data = await self._request(
            "GET", path, params={"includeDisabled": str(include_disabled).lower()}
        )

        def parse(items: Any) -> CategoryListing:
            schemas = [CategorySchema.model_validate(item) for item in items or []]
            listing = CategoryListing()
            for schema in schemas:
                listing.categories.append(schema.to_domain())
                listing.subcategories.extend(schema.subcategories_to_domain())
            return listing

        return await self._parse(path, parse, data)

    async def get_category(self, category_id: CategoryId) -> Category:
        path = f"/api/categories/{category_id}"
        data = await self._request("GET", path)
        return await self._parse(path, lambda d: CategorySchema.model_validate(d).to_domain(), data)

    async def create_category(self, request: CategoryRequest) -> Category:
        path = "/api/categories"
        data = await self._request("POST", path, json=category_payload(request))
        return await self._parse(path, lambda d: CategorySchema.model_validate(d).to_domain(), data)

    async def update_category(self, category_id: CategoryId, request: CategoryRequest) -> Category:
        path = f"/api/categories/{category_id}"
        data = await self._request("PUT", path, json=category_payload(request))
        return await self._parse(path, lambda d: CategorySchema.model_validate(d).to_domain(), data)

    async def delete_category(self, category_id: CategoryId) -> None:
        await self._request("DELETE", f"/api/categories/{category_id}")

    # =========================================================================
    # Sub-categories
    # =========================================================================

    async def create_subcategory(
        self, category_id: CategoryId, request: CategoryRequest
    ) -> SubCategory:
        path = f"/api/categories/{category_id}/subcategories"
        data = await self._request("POST", path, json=category_payload(request))

        def parse(d: Any) -> SubCategory:
            # the endpoint may omit the parent reference it was posted to
            return SubCategorySchema.model_validate(
                {"categoryId": str(category_id), **d}
            ).to_domain()

        return await self._parse(path, parse, data)

    async def update_subcategory(
        self, subcategory_id: SubCategoryId, request: CategoryRequest
    ) -> SubCategory:
        path = f"/api/subcategories/{subcategory_id}"
        data = await self._request("PUT", path, json=category_payload(request))
        return await self._parse(
            path, lambda d: SubCategorySchema.model_validate(d).to_domain(), data
        )

    async def delete_subcategory(self, subcategory_id: SubCategoryId) -> None:
        await self._request("DELETE", f"/api/subcategories/{subcategory_id}")

    # =========================================================================
    # Products
    # =========================================================================

    async def get_product(self, product_id: ProductId) -> Product:
        path = f"/api/products/{product_id}"
        data = await self._request("GET", path)
        return await self._parse(path, lambda d: ProductSchema.model_validate(d).to_domain(), data)

    async def create_product(self, request: ProductRequest) -> Product:
        path = "/api/products"
        data = await self._request("POST", path, json=product_payload(request))
        return await self._parse(path, lambda d: ProductSchema.model_validate(d).to_domain(), data)

    async def update_product(self, product_id: ProductId, request: ProductRequest) -> Product:
        path = f"/api/products/{product_id}"
        data = await self._request("PUT", path, json=product_payload(request))
        return await self._parse(path, lambda d: ProductSchema.model_validate(d).to_domain(), data)

    async def delete_product(self, product_id: ProductId) -> None:
        await self._request("DELETE", f"/api/products/{product_id}")

    # =========================================================================
    # Variants
    # =========================================================================

    async def list_variants(self, product_id: ProductId) -> list[Variant]:
        path = f"/api/admin/products/{product_id}/variants"
        data = await self._request("GET", path)
        return await self._parse(
            path,
            lambda d: [v.to_domain() for v in VariantListSchema.model_validate(d).variants],
            data,
        )

    async def get_variant(self, product_id: ProductId, variant_id: VariantId) -> Variant:
        path = f"/api/admin/products/{product_id}/variants/{variant_id}"
        data = await self._request("GET", path)
        return await self._parse(path, lambda d: VariantSchema.model_validate(d).to_domain(), data)

    async def create_variant(self, product_id: ProductId, request: VariantRequest) -> Variant:
        path = f"/api/admin/products/{product_id}/variants"
        data = await self._request("POST", path, json=variant_payload(request))
        return await self._parse(path, lambda d: VariantSchema.model_validate(d).to_domain(), data)

    async def update_variant(
        self, product_id: ProductId, variant_id: VariantId, request: VariantRequest
    ) -> Variant:
        path = f"/api/admin/products/{product_id}/variants/{variant_id}"
        data = await self._request("PUT", path, json=variant_payload(request))
        return await self._parse(path, lambda d: VariantSchema.model_validate(d).to_domain(), data)

    async def delete_variant(self, product_id: ProductId, variant_id: VariantId) -> None:
        await self._request("DELETE", f"/api/admin/products/{product_id}/variants/{variant_id}")


def _error_message(response: httpx.Response) -> str:
    """Extract the server's message from an error response, verbatim."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "error", "title", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return response.text or response.reason_phrase

"""Tests for the Catalog Service HTTP client."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from storeadmin.application import CatalogServiceError
from storeadmin.domain import (
    CategoryId,
    CategoryRequest,
    Price,
    ProductId,
    SubCategoryId,
    VariantId,
    VariantRequest,
)
from storeadmin.infrastructure import catalog_client
from storeadmin.infrastructure.catalog_client import CatalogAPIClient


def _mock_http(client: CatalogAPIClient, response=None, side_effect=None):
    """Patch the client's transport; returns (patcher, http mock)."""
    http = AsyncMock()
    http.request = AsyncMock(return_value=response, side_effect=side_effect)
    patcher = patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http)
    return patcher, http


CATEGORY_JSON = {
    "id": 1,
    "name": "Clothing",
    "description": "Apparel",
    "iconClass": "bi-bag",
    "isEnabled": True,
    "displayOrder": 2,
    "createdAt": "2024-05-01T10:00:00",
    "subCategories": [
        {
            "id": 10,
            "name": "Shirts",
            "categoryId": 1,
            "categoryName": "Clothing",
            "isEnabled": False,
            "displayOrder": 0,
        }
    ],
}

VARIANT_JSON = {
    "id": 7,
    "productId": 3,
    "name": "Red / M",
    "sku": "TS-RED-M",
    "stockQuantity": 4,
    "priceOverride": 24.5,
    "isAvailable": True,
    "isFeatured": True,
    "displayOrder": 1,
}


class TestCatalogAPIClient:
    """Tests for CatalogAPIClient."""

    @pytest.fixture
    def client(self) -> CatalogAPIClient:
        """Create a test client."""
        return CatalogAPIClient(base_url="http://localhost:5000/", token="secret")

    @pytest.mark.asyncio
    async def test_client_initialization(self, client) -> None:
        """The base URL is normalized and no connection is opened yet."""
        assert client.base_url == "http://localhost:5000"
        assert client._client is None

    @pytest.mark.asyncio
    async def test_http_client_carries_bearer_token(self, client) -> None:
        """The lazily created client authenticates every request."""
        http = await client._get_client()

        assert http.headers["Authorization"] == "Bearer secret"
        assert await client._get_client() is http

        await client.close()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_from_settings(self, monkeypatch) -> None:
        """from_settings reads the Catalog Service settings."""
        monkeypatch.setattr(catalog_client.settings, "catalog_api_url", "http://catalog:8080")
        monkeypatch.setattr(catalog_client.settings, "request_timeout", 5.0)

        client = CatalogAPIClient.from_settings()

        assert client.base_url == "http://catalog:8080"
        assert client.timeout == 5.0

    @pytest.mark.asyncio
    async def test_list_categories_unwraps_envelope(self, client) -> None:
        """Categories and their embedded sub-categories are mapped."""
        response = httpx.Response(
            200, json={"success": True, "data": [CATEGORY_JSON], "count": 1}
        )
        patcher, http = _mock_http(client, response)

        with patcher:
            listing = await client.list_categories(include_disabled=True)

        http.request.assert_awaited_once_with(
            "GET", "/api/categories", json=None, params={"includeDisabled": "true"}
        )
        category = listing.categories[0]
        assert category.id == CategoryId("1")
        assert category.icon_class == "bi-bag"
        assert category.subcategory_ids == (SubCategoryId("10"),)
        sub = listing.subcategories[0]
        assert sub.category_id == CategoryId("1")
        assert not sub.is_enabled

    @pytest.mark.asyncio
    async def test_missing_icon_gets_default(self, client) -> None:
        """Categories without an icon use the default tag."""
        body = {"success": True, "data": {"id": 2, "name": "Home"}}
        patcher, _ = _mock_http(client, httpx.Response(200, json=body))

        with patcher:
            category = await client.get_category(CategoryId("2"))

        assert category.icon_class == "bi-tag"

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_raises_error(self, client) -> None:
        """success: false is a failure even with a 200 status."""
        body = {"success": False, "message": "Category name already exists"}
        patcher, _ = _mock_http(client, httpx.Response(200, json=body))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.create_category(CategoryRequest(name="Clothing"))

        assert exc_info.value.message == "Category name already exists"
        assert not exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_create_category_payload(self, client) -> None:
        """Requests are sent camelCase without empty optionals."""
        body = {"success": True, "data": {"id": 5, "name": "Toys"}}
        patcher, http = _mock_http(client, httpx.Response(201, json=body))

        with patcher:
            await client.create_category(CategoryRequest(name="Toys", display_order=3))

        http.request.assert_awaited_once_with(
            "POST",
            "/api/categories",
            json={"name": "Toys", "isEnabled": True, "displayOrder": 3},
            params=None,
        )

    @pytest.mark.asyncio
    async def test_create_subcategory_fills_parent(self, client) -> None:
        """The parent id is taken from the request path when omitted."""
        body = {"success": True, "data": {"id": 11, "name": "Pants"}}
        patcher, http = _mock_http(client, httpx.Response(201, json=body))

        with patcher:
            sub = await client.create_subcategory(CategoryId("1"), CategoryRequest(name="Pants"))

        assert http.request.await_args.args[1] == "/api/categories/1/subcategories"
        assert sub.category_id == CategoryId("1")
        assert sub.icon_class == "bi-tag-fill"

    @pytest.mark.asyncio
    async def test_list_variants(self, client) -> None:
        """The variant list body is bare JSON."""
        body = {"variants": [VARIANT_JSON], "totalCount": 1}
        patcher, http = _mock_http(client, httpx.Response(200, json=body))

        with patcher:
            variants = await client.list_variants(ProductId("3"))

        assert http.request.await_args.args == ("GET", "/api/admin/products/3/variants")
        variant = variants[0]
        assert variant.id == VariantId("7")
        assert variant.product_id == ProductId("3")
        assert variant.price_override == Price(Decimal("24.50"))
        assert variant.is_featured

    @pytest.mark.asyncio
    async def test_update_variant_payload(self, client) -> None:
        """A missing override is sent as null so it can be removed."""
        patcher, http = _mock_http(client, httpx.Response(200, json=VARIANT_JSON))

        with patcher:
            await client.update_variant(
                ProductId("3"), VariantId("7"), VariantRequest(name="Red / M", stock_quantity=4)
            )

        _, kwargs = http.request.await_args
        assert http.request.await_args.args[1] == "/api/admin/products/3/variants/7"
        assert kwargs["json"] == {
            "name": "Red / M",
            "sku": None,
            "stockQuantity": 4,
            "imageUrl": None,
            "priceOverride": None,
            "isAvailable": True,
            "isFeatured": False,
            "displayOrder": 0,
        }

    @pytest.mark.asyncio
    async def test_get_product(self, client) -> None:
        """Products are bare JSON with a decimal price."""
        body = {"id": 3, "name": "T-Shirt", "price": 19.99, "hasVariants": True}
        patcher, _ = _mock_http(client, httpx.Response(200, json=body))

        with patcher:
            product = await client.get_product(ProductId("3"))

        assert product.price == Price(Decimal("19.99"))
        assert product.has_variants

    @pytest.mark.asyncio
    async def test_malformed_response_raises_error(self, client) -> None:
        """A product without a valid price is a server fault."""
        body = {"id": 3, "name": "T-Shirt", "price": 0}
        patcher, _ = _mock_http(client, httpx.Response(200, json=body))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.get_product(ProductId("3"))

        assert exc_info.value.status_code == 502
        assert exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_out_of_range_price_raises_error(self, client) -> None:
        """A price too large to round to cents is a server fault."""
        body = {"id": 3, "name": "T-Shirt", "price": 1e30}
        patcher, _ = _mock_http(client, httpx.Response(200, json=body))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.get_product(ProductId("3"))

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_non_json_success_body_raises_error(self, client) -> None:
        """An HTML page answered with 200 is reported as a server fault."""
        response = httpx.Response(
            200, text="<html>proxy</html>", headers={"content-type": "text/html"}
        )
        patcher, _ = _mock_http(client, response)

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.create_category(CategoryRequest(name="Shoes"))

        assert exc_info.value.status_code == 502
        assert exc_info.value.is_transient
        assert "/api/categories" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delete_returns_none(self, client) -> None:
        """Empty bodies are accepted."""
        patcher, http = _mock_http(client, httpx.Response(204))

        with patcher:
            result = await client.delete_variant(ProductId("3"), VariantId("7"))

        assert result is None
        assert http.request.await_args.args == ("DELETE", "/api/admin/products/3/variants/7")

    @pytest.mark.asyncio
    async def test_client_error_message_verbatim(self, client) -> None:
        """4xx responses keep the server's message."""
        body = {"success": False, "message": "Cannot delete category with products"}
        patcher, _ = _mock_http(client, httpx.Response(409, json=body))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.delete_category(CategoryId("1"))

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Cannot delete category with products"
        assert not exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_server_error_with_text_body(self, client) -> None:
        """Non-JSON error bodies are passed through as text."""
        patcher, _ = _mock_http(client, httpx.Response(500, text="Internal Server Error"))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.get_product(ProductId("3"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal Server Error"
        assert exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_request_timeout(self, client) -> None:
        """Timeouts carry no status code."""
        patcher, _ = _mock_http(
            client, side_effect=httpx.TimeoutException("Connection timeout")
        )

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.list_variants(ProductId("3"))

        assert exc_info.value.status_code is None
        assert exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_request_error(self, client) -> None:
        """Connection failures carry no status code."""
        patcher, _ = _mock_http(client, side_effect=httpx.RequestError("Connection failed"))

        with patcher, pytest.raises(CatalogServiceError) as exc_info:
            await client.get_category(CategoryId("1"))

        assert exc_info.value.status_code is None
        assert "Connection failed" in exc_info.value.message

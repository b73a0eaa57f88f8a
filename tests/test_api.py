"""Tests for the stock/catalog API client"""
import httpx
import pytest

from rocketshoes import config
from rocketshoes.api import ShopApi
from rocketshoes.errors import CatalogUnavailable, StockUnavailable
from rocketshoes.models import Stock


def make_api(handler) -> ShopApi:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop.test")
    return ShopApi(client=client)


@pytest.mark.asyncio
async def test_get_stock():
    """Stock amount is parsed from GET stock/{id}"""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"id": 1, "amount": 3, "warehouse": "SP"})

    api = make_api(handler)
    stock = await api.get_stock(1)

    assert stock == Stock(id=1, amount=3)
    assert requests[0].method == "GET"
    assert requests[0].url == "http://shop.test/stock/1"


@pytest.mark.asyncio
async def test_get_product_keeps_extra_fields():
    """Unknown product fields survive parsing"""

    def handler(request):
        assert request.url.path == "/products/2"
        return httpx.Response(200, json={
            "id": 2,
            "title": "Tênis VR Caminhada Confortável",
            "price": 139.9,
            "image": "https://cdn.example.com/2.jpg",
            "color": "preto",
        })

    product = await make_api(handler).get_product(2)

    assert product.id == 2
    assert product.price == 139.9
    assert product.model_dump()["color"] == "preto"


@pytest.mark.asyncio
async def test_http_error_status_is_not_retried():
    """A 404 fails at once"""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404, json={})

    with pytest.raises(StockUnavailable) as exc_info:
        await make_api(handler).get_stock(9)

    assert len(calls) == 1
    assert exc_info.value.product_id == 9


@pytest.mark.asyncio
async def test_transport_errors_are_retried():
    """Connection failures are retried, then reported"""
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CatalogUnavailable):
        await make_api(handler).get_product(1)

    assert len(calls) == config.API_RETRY_ATTEMPTS


@pytest.mark.asyncio
async def test_transport_error_then_success():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json={"id": 1, "amount": 7})

    stock = await make_api(handler).get_stock(1)

    assert stock.amount == 7
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_invalid_body_is_reported():
    """Non-JSON and schema mismatches become StockUnavailable"""
    api = make_api(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(StockUnavailable):
        await api.get_stock(1)

    api = make_api(lambda request: httpx.Response(200, json={"id": 1}))

    with pytest.raises(StockUnavailable):
        await api.get_stock(1)


@pytest.mark.asyncio
async def test_context_manager_closes_own_client():
    async with ShopApi(base_url="http://shop.test") as api:
        client = api.client

    assert client.is_closed


@pytest.mark.asyncio
async def test_injected_client_is_left_open():
    client = httpx.AsyncClient(base_url="http://shop.test")

    async with ShopApi(client=client):
        pass

    assert not client.is_closed
    await client.aclose()

# API client unit tests
import httpx
import pytest

from app.core.exceptions import CorreiosAPIError
from app.services.correios.client import CorreiosClient

BASE_URL = "https://api.correios.com.br"


@pytest.mark.asyncio
async def test_get_prices_builds_batch(mock_correios):
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=mock_correios.transport)

    result = await client.get_prices("tok", ["03298", "03220"], "60160230", "51110160", 300)

    assert result == mock_correios.prices
    body = mock_correios.last_body(CorreiosClient.PRICE_PATH)
    assert body["idLote"] == "1"
    assert body["parametrosProduto"] == [
        {"coProduto": "03298", "nuRequisicao": "1", "cepOrigem": "60160230", "cepDestino": "51110160", "psObjeto": "300"},
        {"coProduto": "03220", "nuRequisicao": "2", "cepOrigem": "60160230", "cepDestino": "51110160", "psObjeto": "300"},
    ]
    request = mock_correios.last_request(CorreiosClient.PRICE_PATH)
    assert request.headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_get_deadlines_builds_batch(mock_correios):
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=mock_correios.transport)

    result = await client.get_deadlines("tok", ["03298"], "60160230", "51110160")

    assert result == mock_correios.deadlines
    body = mock_correios.last_body(CorreiosClient.DEADLINE_PATH)
    assert body["parametrosPrazo"] == [
        {"coProduto": "03298", "nuRequisicao": "1", "cepOrigem": "60160230", "cepDestino": "51110160"},
    ]


@pytest.mark.asyncio
async def test_single_object_response_is_wrapped():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"coProduto": "03298", "pcFinal": "20,00"})
    )
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=transport)

    result = await client.get_prices("tok", ["03298"], "60160230", "51110160", 300)

    assert result == [{"coProduto": "03298", "pcFinal": "20,00"}]


@pytest.mark.asyncio
async def test_api_error_status_raises(mock_correios):
    mock_correios.price_status = 503
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=mock_correios.transport)

    with pytest.raises(CorreiosAPIError) as exc_info:
        await client.get_prices("tok", ["03298"], "60160230", "51110160", 300)

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_network_error_raises(mock_correios):
    mock_correios.should_fail = True
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=mock_correios.transport)

    with pytest.raises(CorreiosAPIError) as exc_info:
        await client.get_deadlines("tok", ["03298"], "60160230", "51110160")

    assert "Network error" in str(exc_info.value)


@pytest.mark.asyncio
async def test_non_json_body_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>manutenção</html>"))
    client = CorreiosClient(base_url=BASE_URL, timeout=5, transport=transport)

    with pytest.raises(CorreiosAPIError):
        await client.get_prices("tok", ["03298"], "60160230", "51110160", 300)

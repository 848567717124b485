import httpx
import pytest

from holdings_engine.exceptions import BackendRequestError
from holdings_engine.infrastructure.backend.client import BackendClient


def _client(handler, token="secret-token"):
    return BackendClient(
        api_base_url="https://backend.test/api/",
        access_token=token,
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_json_sends_bearer_token_and_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"data": {"ok": True}})

    payload = await _client(handler).get_json("/holdings/TEST", params={"asAt": "today"})

    assert payload == {"data": {"ok": True}}
    assert seen["url"] == "https://backend.test/api/holdings/TEST?asAt=today"
    assert seen["auth"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_post_json_sends_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = request.content
        return httpx.Response(200, json={})

    await _client(handler).post_json("/fx", {"rateDate": "today"})

    assert seen["method"] == "POST"
    assert b'"rateDate"' in seen["body"]


@pytest.mark.asyncio
async def test_non_2xx_raises_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(BackendRequestError) as exc_info:
        await _client(handler).get_json("/holdings/TEST")

    assert exc_info.value.status_code == 503
    assert exc_info.value.url == "https://backend.test/api/holdings/TEST"


@pytest.mark.asyncio
async def test_transport_error_raises_backend_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendRequestError) as exc_info:
        await _client(handler).get_json("/currencies")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_backend_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login</html>")

    with pytest.raises(BackendRequestError):
        await _client(handler).get_json("/currencies")


def test_no_authorization_header_without_token(monkeypatch):
    from holdings_engine import config as config_module
    monkeypatch.setattr(config_module.settings, "BACKEND_API_TOKEN", None)

    client = BackendClient(api_base_url="https://backend.test", access_token="  ")

    assert "Authorization" not in client._headers()

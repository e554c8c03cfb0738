import httpx
import pytest

from assistant_core.domain.exceptions import (
    AuthError,
    NotFoundError,
    RemoteError,
    TransportError,
    ValidationError,
)
from assistant_core.providers.registry import ProviderConfig
from assistant_core.providers.vapi_client import VapiSessionClient


class SettingsStub:
    vapi_api_key = "test-key-123456"
    http_timeout = None
    vapi_base_url = "https://api.vapi.ai"


class Resp:
    def __init__(self, status_code, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def install_client(monkeypatch, resp, captured=None):
    """用假的 AsyncClient 替换 httpx.AsyncClient，记录请求参数。"""

    class Client:
        def __init__(self, *a, **kw):
            if captured is not None:
                captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None, **_):
            if captured is not None:
                captured.setdefault("calls", []).append({"url": url, "json": json, "headers": headers})
            if isinstance(resp, Exception):
                raise resp
            return resp

    monkeypatch.setattr("httpx.AsyncClient", Client)


@pytest.mark.asyncio
async def test_create_session_posts_assistant_id(monkeypatch):
    captured = {}
    install_client(monkeypatch, Resp(201, {"id": "S1", "assistantId": "A1"}), captured)
    session_id = await VapiSessionClient(SettingsStub()).create_session("A1")
    assert session_id == "S1"
    call = captured["calls"][0]
    assert call["url"] == "https://api.vapi.ai/session"
    assert call["json"] == {"assistantId": "A1"}
    assert call["headers"]["Authorization"] == "Bearer test-key-123456"
    assert captured["client_kwargs"]["timeout"] is None
    assert len(captured["calls"]) == 1


@pytest.mark.asyncio
async def test_send_message_reads_last_assistant_output(monkeypatch):
    captured = {}
    body = {
        "id": "chat_1",
        "sessionId": "S1",
        "output": [
            {"role": "assistant", "content": "first"},
            {"role": "tool", "content": "ignored"},
            {"role": "assistant", "content": "hi there"},
        ],
    }
    install_client(monkeypatch, Resp(200, body), captured)
    reply = await VapiSessionClient(SettingsStub()).send_message("S1", "hello")
    assert reply == "hi there"
    call = captured["calls"][0]
    assert call["url"] == "https://api.vapi.ai/chat"
    assert call["json"] == {"sessionId": "S1", "input": "hello"}


@pytest.mark.asyncio
async def test_send_combined_uses_legacy_endpoint(monkeypatch):
    captured = {}
    install_client(monkeypatch, Resp(200, {"response": "ok"}), captured)
    reply = await VapiSessionClient(SettingsStub()).send_combined("A1", "hello")
    assert reply == "ok"
    call = captured["calls"][0]
    assert call["url"] == "https://api.vapi.ai/conversation/send-message"
    assert call["json"] == {"assistant_id": "A1", "message": "hello"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, exc_type",
    [(401, AuthError), (403, AuthError), (404, NotFoundError), (429, RemoteError), (500, RemoteError)],
)
async def test_status_mapping(monkeypatch, status, exc_type):
    install_client(monkeypatch, Resp(status, {"message": "rate limited"}))
    with pytest.raises(exc_type) as info:
        await VapiSessionClient(SettingsStub()).send_message("S1", "hello")
    assert info.value.http_status == status
    assert info.value.message == "rate limited"
    assert info.value.payload == {"message": "rate limited"}


@pytest.mark.asyncio
async def test_error_message_list_is_joined(monkeypatch):
    install_client(monkeypatch, Resp(400, {"message": ["input should not be empty", "bad id"]}))
    with pytest.raises(RemoteError) as info:
        await VapiSessionClient(SettingsStub()).create_session("A1")
    assert info.value.message == "input should not be empty; bad id"


@pytest.mark.asyncio
async def test_error_without_json_falls_back_to_text(monkeypatch):
    install_client(monkeypatch, Resp(502, None, text="Bad Gateway"))
    with pytest.raises(RemoteError) as info:
        await VapiSessionClient(SettingsStub()).create_session("A1")
    assert info.value.message == "Bad Gateway"
    assert info.value.payload is None


@pytest.mark.asyncio
async def test_network_error_becomes_transport_error(monkeypatch):
    install_client(monkeypatch, httpx.ConnectError("connection refused"))
    with pytest.raises(TransportError) as info:
        await VapiSessionClient(SettingsStub()).create_session("A1")
    assert info.value.code == "NETWORK_ERROR"
    assert "connection refused" in info.value.message


@pytest.mark.asyncio
async def test_missing_fields_raise_bad_response(monkeypatch):
    install_client(monkeypatch, Resp(200, {"status": "ok"}))
    client = VapiSessionClient(SettingsStub())
    with pytest.raises(RemoteError) as info:
        await client.create_session("A1")
    assert info.value.code == "BAD_RESPONSE"
    with pytest.raises(RemoteError):
        await client.send_message("S1", "hello")


@pytest.mark.asyncio
async def test_missing_api_key_sends_nothing(monkeypatch):
    captured = {}
    install_client(monkeypatch, Resp(200, {"id": "S1"}), captured)

    class NoKey(SettingsStub):
        vapi_api_key = None

    with pytest.raises(ValidationError) as info:
        await VapiSessionClient(NoKey()).create_session("A1")
    assert info.value.code == "MISSING_API_KEY"
    assert "calls" not in captured


@pytest.mark.asyncio
async def test_empty_arguments_rejected(monkeypatch):
    install_client(monkeypatch, Resp(200, {"id": "S1"}))
    client = VapiSessionClient(SettingsStub())
    with pytest.raises(ValidationError):
        await client.create_session("")
    with pytest.raises(ValidationError):
        await client.send_message("", "hello")
    with pytest.raises(ValidationError):
        await client.send_message("S1", "")


@pytest.mark.asyncio
async def test_non_string_content_is_not_a_reply(monkeypatch):
    body = {"output": [{"role": "assistant", "content": [{"type": "text", "text": "hi"}]}]}
    install_client(monkeypatch, Resp(200, body))
    with pytest.raises(RemoteError) as info:
        await VapiSessionClient(SettingsStub()).send_message("S1", "hello")
    assert info.value.code == "BAD_RESPONSE"


@pytest.mark.asyncio
async def test_non_string_content_is_skipped(monkeypatch):
    body = {
        "output": [
            {"role": "assistant", "content": "earlier"},
            {"role": "assistant", "content": {"text": "structured"}},
        ],
        "response": "fallback",
    }
    install_client(monkeypatch, Resp(200, body))
    reply = await VapiSessionClient(SettingsStub()).send_message("S1", "hello")
    assert isinstance(reply, str)
    assert reply == "earlier"

    install_client(monkeypatch, Resp(200, {"output": [{"role": "assistant", "content": 42}], "response": "fallback"}))
    reply = await VapiSessionClient(SettingsStub()).send_message("S1", "hello")
    assert reply == "fallback"


@pytest.mark.asyncio
async def test_provider_config_controls_endpoints(monkeypatch):
    captured = {}
    install_client(monkeypatch, Resp(200, {"id": "S9"}), captured)

    class NoBase(SettingsStub):
        vapi_base_url = None

    provider = ProviderConfig(
        name="vapi",
        base_url="https://staging.example.com/",
        session_path="/v2/session",
        message_path="/v2/chat",
        combined_path="/v2/send",
    )
    await VapiSessionClient(NoBase(), provider=provider).create_session("A1")
    assert captured["calls"][0]["url"] == "https://staging.example.com/v2/session"

import asyncio
import json

import httpx
import pytest

from docintel.core.exceptions import FolderNotFoundError, GatewayError
from docintel.schemas import ApiKeys, DocumentFile, Folder
from docintel.services.chat import ChatService, build_context_info, to_chat_usage
from docintel.services.credentials import CredentialProvider, StoreCredentialProvider
from docintel.services.llm.transport import (
    ChatTransport, DirectChatTransport, GatewayChatTransport, create_transport
)


class StaticCredentialProvider(CredentialProvider):
    def __init__(self, keys=None):
        self.keys = dict(keys or {})

    def get_api_key(self, engine):
        return self.keys.get(engine) or None


class FakeTransport(ChatTransport):
    def __init__(self, result=None, error=None):
        self.result = result or {"content": "answer", "usage": None}
        self.error = error
        self.calls = []

    async def complete(self, engine, user_message, context_info=None, api_key=None):
        self.calls.append({
            "engine": engine,
            "user_message": user_message,
            "context_info": context_info,
            "api_key": api_key,
        })
        if self.error is not None:
            raise self.error
        return self.result


def make_file(file_id, folder_id, size=1048576, **extra):
    return DocumentFile(
        id=file_id, name=f"{file_id}.pdf", type="application/pdf",
        size=size, folder_id=folder_id, ai_engine="qwen", **extra,
    )


def test_context_info_lists_folder_contents():
    folder = Folder(id="7", name="Invoices", path="/Invoices")
    files = [
        make_file("a", "7", ocr_text="Total: 100 EUR"),
        make_file("b", "7", summary="Late fee notice"),
    ]

    context = build_context_info(folder, files)

    assert context.startswith("Folder: Invoices\nFiles: a.pdf, b.pdf\nTotal files: 2\nTotal size: 2.00 MB")
    assert "OCR Content:\nFile: a.pdf\nOCR Text: Total: 100 EUR" in context
    assert "File Summaries:\nFile: b.pdf\nSummary: Late fee notice" in context


def test_context_info_empty_without_files():
    assert build_context_info(None, []) == ""
    assert build_context_info(Folder(id="7", name="Empty", path="/Empty"), []) == ""


@pytest.mark.parametrize("usage, expected", [
    ({"total_tokens": 15}, 15),
    ({"input_tokens": 10, "output_tokens": 5}, 15),
    ({"prompt_tokens": 3, "completion_tokens": 4}, 7),
])
def test_to_chat_usage(usage, expected):
    result = to_chat_usage(usage)
    assert result.tokens_used == expected
    assert result.cost == 0.0


def test_to_chat_usage_missing():
    assert to_chat_usage(None) is None
    assert to_chat_usage({"unexpected": "shape"}) is None


def test_send_records_both_turns(store):
    folder = store.create_folder("Invoices")
    store.upload_file(make_file("a", folder.id))
    transport = FakeTransport({"content": "All paid.", "usage": {"total_tokens": 20}})
    service = ChatService(store, transport, StaticCredentialProvider({"qwen": "k"}))

    user_message, reply = asyncio.run(service.send("Anything overdue?", "qwen", folder_id=folder.id))

    call = transport.calls[0]
    assert call["engine"] == "qwen"
    assert call["api_key"] == "k"
    assert call["context_info"].startswith("Folder: Invoices")
    assert user_message.role == "user"
    assert reply.role == "assistant"
    assert reply.content == "All paid."
    assert reply.usage.tokens_used == 20
    assert [m.id for m in store.chat_messages] == [user_message.id, reply.id]
    assert store.usage.chats_used == 1


def test_send_without_folder_sends_no_context(store):
    transport = FakeTransport()
    service = ChatService(store, transport, StaticCredentialProvider())

    asyncio.run(service.send("hello", "openai"))

    assert transport.calls[0]["context_info"] is None
    assert transport.calls[0]["api_key"] is None


def test_send_unknown_folder(store):
    service = ChatService(store, FakeTransport(), StaticCredentialProvider())

    with pytest.raises(FolderNotFoundError):
        asyncio.run(service.send("hello", "qwen", folder_id="missing"))
    assert store.chat_messages == []


def test_local_engine_answers_without_transport(store):
    folder = store.create_folder("Contracts")
    store.upload_file(make_file("a", folder.id))
    transport = FakeTransport()
    service = ChatService(store, transport, StaticCredentialProvider())

    _, reply = asyncio.run(service.send("Summarize", "docintel", folder_id=folder.id))

    assert transport.calls == []
    assert '"Contracts" folder containing 1 document(s)' in reply.content
    assert store.analytics.ai_engine_usage.docintel == 1


def test_upstream_error_becomes_assistant_message(store):
    error = GatewayError(status_code=401, error="OpenAI API error (401): Incorrect API key provided")
    service = ChatService(store, FakeTransport(error=error), StaticCredentialProvider())

    user_message, reply = asyncio.run(service.send("hello", "openai"))

    assert reply.content.startswith("Sorry, I encountered an error while processing your request: OpenAI API error (401)")
    assert reply.usage is None
    assert store.usage.chats_used == 1


@pytest.mark.parametrize("engine, fragment", [
    ("qwen", "dashscope.aliyuncs.com"),
    ("openai", "Connection to OPENAI API failed"),
])
def test_connection_error_message(store, engine, fragment):
    error = GatewayError(status_code=503, error="down", error_type="connection_error")
    service = ChatService(store, FakeTransport(error=error), StaticCredentialProvider())

    _, reply = asyncio.run(service.send("hello", engine))

    assert fragment in reply.content


def test_store_credentials_prefer_saved_keys(store):
    provider = StoreCredentialProvider(store)
    assert provider.get_api_key("openai") is None

    store.save_api_keys(ApiKeys(qwen="saved-qwen"))

    assert provider.get_api_key("qwen") == "saved-qwen"


def test_gateway_transport_posts_camel_case():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"content": "ok", "usage": {"total_tokens": 3}})

    transport = GatewayChatTransport("http://gateway.local/api/ai-proxy", transport=httpx.MockTransport(handler))

    result = asyncio.run(transport.complete("qwen", "hi", context_info="ctx", api_key="k"))

    assert result == {"content": "ok", "usage": {"total_tokens": 3}}
    assert json.loads(seen[0].content) == {
        "contextInfo": "ctx", "userMessage": "hi", "engine": "qwen", "apiKey": "k",
    }


def test_gateway_transport_maps_error_body():
    def handler(request):
        return httpx.Response(429, json={"error": "Qwen API error (429): slow down", "details": {"code": "x"}})

    transport = GatewayChatTransport("http://gateway.local/api/ai-proxy", transport=httpx.MockTransport(handler))

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(transport.complete("qwen", "hi"))

    assert exc_info.value.status_code == 429
    assert exc_info.value.error == "Qwen API error (429): slow down"
    assert exc_info.value.details == {"code": "x"}


def test_gateway_transport_connection_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    transport = GatewayChatTransport("http://gateway.local/api/ai-proxy", transport=httpx.MockTransport(handler))

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(transport.complete("openai", "hi"))

    assert exc_info.value.status_code == 503
    assert exc_info.value.error_type == "connection_error"


def test_create_transport_modes():
    assert isinstance(create_transport("direct"), DirectChatTransport)
    assert isinstance(create_transport("GATEWAY"), GatewayChatTransport)
    with pytest.raises(ValueError):
        create_transport("carrier-pigeon")

import httpx
import pytest

from aicommit.config import load_config
from aicommit.exceptions import (
    ApiError,
    ConfigError,
    GenerationError,
    MalformedResponse,
)
from aicommit.providers.base import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatError,
    ChatMessage,
)
from aicommit.providers.openai_driver import (
    OpenAIDriver,
    parse_chat_response,
    read_chat_response,
)


def _request(diff="diff --git a b"):
    return ChatCompletionRequest(
        model="gpt-test",
        messages=[
            ChatMessage(role="system", content="sys"),
            ChatMessage(role="user", content=diff),
        ],
        temperature=0.3,
        max_tokens=256,
    )


def test_request_payload_shape():
    payload = _request().to_payload()

    assert payload == {
        "model": "gpt-test",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "diff --git a b"},
        ],
        "temperature": 0.3,
        "max_tokens": 256,
    }


def test_read_response_builds_typed_model():
    ok = read_chat_response({"choices": [{"message": {"content": " fix bug "}}]})
    failed = read_chat_response({"error": {"message": "rate limited"}})

    assert ok == ChatCompletionResponse(content="fix bug")
    assert failed == ChatCompletionResponse(error=ChatError("rate limited"))
    assert read_chat_response({"unexpected": True}) == ChatCompletionResponse()


def test_parse_success():
    data = {"choices": [{"message": {"content": "  fix bug\n"}}]}
    assert parse_chat_response(data) == "fix bug"


def test_parse_content_fragments():
    data = {"choices": [{"message": {"content": [{"text": "fix "}, {"text": "bug"}]}}]}
    assert parse_chat_response(data) == "fix bug"


def test_parse_error_message():
    with pytest.raises(ApiError) as ei:
        parse_chat_response({"error": {"message": "rate limited"}}, status_code=429)
    assert ei.value.error_text == "rate limited"
    assert ei.value.status_code == 429


def test_parse_empty_content_rechecks_error():
    data = {
        "choices": [{"message": {"content": ""}}],
        "error": {"message": "content filtered"},
    }
    with pytest.raises(ApiError, match="content filtered"):
        parse_chat_response(data)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": "   "}}]},
        {"error": "flat string"},
        {"error": {"code": 500}},
        ["not", "an", "object"],
    ],
)
def test_parse_malformed(data):
    with pytest.raises(MalformedResponse):
        parse_chat_response(data)


def test_driver_requires_api_key(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    cfg = load_config(repo_root=tmp_path)

    with pytest.raises(ConfigError):
        OpenAIDriver(cfg)


def test_driver_posts_json(tmp_path, fake_api):
    cfg = load_config(repo_root=tmp_path, overrides={"request_timeout": 7})
    fake_api.respond({"choices": [{"message": {"content": "fix bug"}}]})
    diff = 'diff --git a/x b/x\n+print("quoted\\ttext")\n\x1b[0m'

    text = OpenAIDriver(cfg).complete(_request(diff))

    assert text == "fix bug"
    (call,) = fake_api.calls
    assert call["url"] == "https://api.openai.com/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] == 7.0
    # The diff travels verbatim inside the structured body
    assert call["json"]["messages"][1]["content"] == diff


def test_driver_surfaces_api_error(tmp_path, fake_api):
    cfg = load_config(repo_root=tmp_path)
    fake_api.respond({"error": {"message": "rate limited"}}, status_code=429)

    with pytest.raises(ApiError, match="rate limited"):
        OpenAIDriver(cfg).complete(_request())


def test_driver_non_json_body_is_malformed(tmp_path, fake_api):
    cfg = load_config(repo_root=tmp_path)
    fake_api.respond(None, status_code=502)

    with pytest.raises(MalformedResponse):
        OpenAIDriver(cfg).complete(_request())


def test_driver_network_error(tmp_path, monkeypatch):
    cfg = load_config(repo_root=tmp_path)

    def boom(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx, "post", boom)

    with pytest.raises(GenerationError) as ei:
        OpenAIDriver(cfg).complete(_request())
    assert not isinstance(ei.value, (ApiError, MalformedResponse))


def test_driver_timeout(tmp_path, monkeypatch):
    cfg = load_config(repo_root=tmp_path, overrides={"request_timeout": 3})

    def slow(*args, **kwargs):
        raise httpx.ReadTimeout("too slow")

    monkeypatch.setattr(httpx, "post", slow)

    with pytest.raises(GenerationError, match="3s"):
        OpenAIDriver(cfg).complete(_request())

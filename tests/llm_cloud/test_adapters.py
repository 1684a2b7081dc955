"""
Unit tests for `llm_cloud/adapters.py`.

The OpenAI SDK client is replaced by a MagicMock and `urlopen` is patched for the Anthropic adapter,
so no request leaves the process.
"""

import http.client
import io
import json
import socket
from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from urllib import error as urlerror

import httpx
import openai
import pytest

from llm_cloud.adapters import (
    AnthropicAdapter,
    MalformedPayloadError,
    OpenAICompatibleAdapter,
    ProviderCallError,
    ProviderTimeoutError,
    build_adapters,
)
from tests.fakes import make_provider

PROVIDER = make_provider("OpenAI")
CLAUDE = make_provider("Anthropic Claude", api_style="anthropic")


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def openai_adapter(**create_kwargs):
    client = MagicMock()
    client.chat.completions.create = MagicMock(**create_kwargs)
    return OpenAICompatibleAdapter(api_key="key", timeout_s=2.0, client=client), client


def test_openai_adapter_sends_prompt_pair_and_model_settings():
    adapter, client = openai_adapter(return_value=completion("Keep a routine."))

    assert adapter.call("system", "user", PROVIDER) == "Keep a routine."
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]
    assert kwargs["max_tokens"] == 1000


def test_openai_timeout_is_mapped():
    request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
    adapter, _ = openai_adapter(side_effect=openai.APITimeoutError(request=request))
    with pytest.raises(ProviderTimeoutError):
        adapter.call("system", "user", PROVIDER)


def test_openai_connection_error_is_mapped():
    request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
    adapter, _ = openai_adapter(side_effect=openai.APIConnectionError(request=request))
    with pytest.raises(ProviderCallError) as excinfo:
        adapter.call("system", "user", PROVIDER)
    assert not isinstance(excinfo.value, ProviderTimeoutError)


@pytest.mark.parametrize("response", [completion(None), completion("   "), SimpleNamespace(choices=[])])
def test_openai_malformed_answers(response):
    adapter, _ = openai_adapter(return_value=response)
    with pytest.raises(MalformedPayloadError):
        adapter.call("system", "user", PROVIDER)


def fake_response(payload, status=200):
    response = MagicMock()
    response.status = status
    response.read.return_value = json.dumps(payload).encode("utf-8")
    response.__enter__.return_value = response
    return response


@patch("llm_cloud.adapters.urlrequest.urlopen")
def test_anthropic_adapter(mock_urlopen):
    mock_urlopen.return_value = fake_response({"content": [{"type": "text", "text": "Take a breath."}]})

    answer = AnthropicAdapter(api_key="secret", timeout_s=3.0).call("system", "user", CLAUDE)

    assert answer == "Take a breath."
    req = mock_urlopen.call_args.args[0]
    assert req.get_header("X-api-key") == "secret"
    assert req.get_header("Anthropic-version") == "2023-06-01"
    body = json.loads(req.data.decode("utf-8"))
    assert body["system"] == "system"
    assert body["messages"] == [{"role": "user", "content": "user"}]
    assert mock_urlopen.call_args.kwargs["timeout"] == 3.0


@patch("llm_cloud.adapters.urlrequest.urlopen", side_effect=socket.timeout())
def test_anthropic_timeout(mock_urlopen):
    with pytest.raises(ProviderTimeoutError):
        AnthropicAdapter(api_key="secret").call("system", "user", CLAUDE)


@patch("llm_cloud.adapters.urlrequest.urlopen")
def test_anthropic_http_error(mock_urlopen):
    mock_urlopen.side_effect = urlerror.HTTPError(CLAUDE.endpoint, 529, "Overloaded", {}, io.BytesIO(b""))
    with pytest.raises(ProviderCallError):
        AnthropicAdapter(api_key="secret").call("system", "user", CLAUDE)


@patch("llm_cloud.adapters.urlrequest.urlopen")
def test_anthropic_unexpected_payload(mock_urlopen):
    mock_urlopen.return_value = fake_response({"type": "error"})
    with pytest.raises(MalformedPayloadError):
        AnthropicAdapter(api_key="secret").call("system", "user", CLAUDE)


def test_build_adapters_only_for_providers_with_keys():
    config = {
        "llm": {
            "timeout_s": 7,
            "providers": [
                {"name": "OpenAI", "api_key_env": "OPENAI_API_KEY", "endpoint": "e", "model": "m"},
                {"name": "Anthropic Claude", "api_key_env": "ANTHROPIC_API_KEY", "endpoint": "e",
                 "model": "m", "api_style": "anthropic"},
            ],
        }
    }
    adapters = build_adapters(config, environ={"ANTHROPIC_API_KEY": "secret", "OPENAI_API_KEY": "  "})

    assert list(adapters) == ["Anthropic Claude"]
    assert isinstance(adapters["Anthropic Claude"], AnthropicAdapter)
    assert adapters["Anthropic Claude"].timeout_s == 7.0


@patch("llm_cloud.adapters.urlrequest.urlopen")
def test_anthropic_dropped_connection(mock_urlopen):
    mock_urlopen.side_effect = http.client.RemoteDisconnected("Remote end closed connection")
    with pytest.raises(ProviderCallError) as excinfo:
        AnthropicAdapter(api_key="secret").call("system", "user", CLAUDE)
    assert not isinstance(excinfo.value, ProviderTimeoutError)


@patch("llm_cloud.adapters.urlrequest.urlopen")
def test_anthropic_truncated_body(mock_urlopen):
    response = fake_response({})
    response.read.side_effect = http.client.IncompleteRead(b"{\"content")
    mock_urlopen.return_value = response
    with pytest.raises(ProviderCallError):
        AnthropicAdapter(api_key="secret").call("system", "user", CLAUDE)


def test_unexpected_adapter_errors_become_call_errors():
    adapter, _ = openai_adapter(side_effect=RuntimeError("sdk bug"))
    with pytest.raises(ProviderCallError) as excinfo:
        adapter.call("system", "user", PROVIDER)
    assert isinstance(excinfo.value.__cause__, RuntimeError)

"""
Provider adapters: the one place that talks to external language-model APIs.

The orchestration engine composes a backend-agnostic system/user prompt pair and hands
it to an adapter. Each adapter hides the transport details of one API family:

- OpenAICompatibleAdapter: OpenAI, DeepSeek, Groq and any other chat-completions
  endpoint, driven through the official `openai` SDK with a per-provider base URL.
- AnthropicAdapter: the Anthropic messages API over plain HTTP (standard library only),
  mirroring how the other HTTP clients in this codebase are written.

Adapters translate every failure into the shared taxonomy. `ProviderCallError` covers
network problems and non-success statuses, `ProviderTimeoutError` the configured timeout,
and `MalformedPayloadError` answers whose shape is unexpected. The orchestrator treats all
of them as a signal to fall back, never as an error to surface.
"""

from __future__ import annotations

import http.client
import json
import logging
import socket
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional
from urllib import error as urlerror
from urllib import request as urlrequest

import openai
from openai import OpenAI

from llm_cloud.provider import resolve_api_key
from monitoring.metrics import LLM_REQUEST_TIME
from shared.errors import AssistantError, CollaboratorTimeoutError, MalformedBackendPayload, TransientNetworkFailure
from shared.models import Provider

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class ProviderCallError(TransientNetworkFailure):
    """The provider could not be reached or answered with a non-success status."""


class ProviderTimeoutError(ProviderCallError, CollaboratorTimeoutError):
    """The provider call exceeded its configured timeout."""


class MalformedPayloadError(MalformedBackendPayload):
    """The provider answered with a payload that does not contain usable text."""


class ProviderAdapter(ABC):
    """
    Abstract adapter defining the single operation the orchestrator needs from a backend.

    Implementations own their credential and transport. The `Provider` record passed to
    `call` carries the model settings (model name, max tokens, temperature), so one adapter
    class can serve several providers of the same API family.
    """

    def __init__(self, api_key: str, timeout_s: float = 20.0) -> None:
        self._api_key = api_key
        self.timeout_s = float(timeout_s)

    @abstractmethod
    def _complete(self, system_prompt: str, user_prompt: str, provider: Provider) -> str:
        """Perform the API call and return the raw answer text."""
        raise NotImplementedError

    def call(self, system_prompt: str, user_prompt: str, provider: Provider) -> str:
        """
        Generate an answer for the composed prompt pair.

        Args:
            system_prompt (str): Fixed assistant instructions.
            user_prompt (str): Question, context and optional research block.
            provider (Provider): Registry entry with model configuration.

        Returns:
            str: Non-empty answer text, unsanitized.

        Raises:
            ProviderTimeoutError, ProviderCallError, MalformedPayloadError.
        """
        start_time = time.time()
        try:
            text = self._complete(system_prompt, user_prompt, provider)
        except AssistantError:
            raise
        except Exception as exc:
            # Anything outside the taxonomy still counts as a failed call
            raise ProviderCallError(f"{provider.name} call failed: {exc!r}") from exc
        finally:
            LLM_REQUEST_TIME.labels(provider=provider.name).observe(time.time() - start_time)

        if not isinstance(text, str) or not text.strip():
            raise MalformedPayloadError(f"{provider.name} returned an empty answer")
        return text


class OpenAICompatibleAdapter(ProviderAdapter):
    """
    Adapter for chat-completions APIs reachable through the `openai` SDK.

    The client is built lazily on first use and then reused, which keeps construction
    free of side effects and lets tests inject a fake client.
    """

    def __init__(self, api_key: str, timeout_s: float = 20.0, client: Optional[Any] = None) -> None:
        super().__init__(api_key, timeout_s)
        self._client = client

    def get_client(self, provider: Provider) -> OpenAI:
        """Return the SDK client for this provider, building it on first use."""
        if self._client is None:
            self._client = OpenAI(
                base_url=provider.endpoint,
                api_key=self._api_key,
                timeout=self.timeout_s,
                max_retries=0,  # the fallback chain is the retry policy
            )
        return self._client

    def _complete(self, system_prompt: str, user_prompt: str, provider: Provider) -> str:
        client = self.get_client(provider)
        try:
            response = client.chat.completions.create(
                model=provider.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=provider.max_tokens,
                temperature=provider.temperature,
                stream=False,
            )
        except openai.APITimeoutError as exc:
            raise ProviderTimeoutError(f"{provider.name} timed out after {self.timeout_s}s") from exc
        except openai.APIError as exc:
            raise ProviderCallError(f"{provider.name} API error: {exc}") from exc

        try:
            return response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise MalformedPayloadError(f"{provider.name} returned no choices") from exc


class AnthropicAdapter(ProviderAdapter):
    """Adapter for the Anthropic messages API (standard-library HTTP)."""

    def _complete(self, system_prompt: str, user_prompt: str, provider: Provider) -> str:
        body = {
            "model": provider.model,
            "max_tokens": provider.max_tokens,
            "temperature": provider.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        req = urlrequest.Request(provider.endpoint, data=json.dumps(body).encode("utf-8"), method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("x-api-key", self._api_key)
        req.add_header("anthropic-version", ANTHROPIC_VERSION)

        try:
            with urlrequest.urlopen(req, timeout=self.timeout_s) as resp:
                status = getattr(resp, "status", 200)
                text = resp.read().decode("utf-8", errors="replace")
        except socket.timeout as exc:
            raise ProviderTimeoutError(f"{provider.name} timed out after {self.timeout_s}s") from exc
        except urlerror.HTTPError as exc:
            raise ProviderCallError(f"{provider.name} API error: {exc.code}") from exc
        except urlerror.URLError as exc:
            if isinstance(exc.reason, socket.timeout):
                raise ProviderTimeoutError(f"{provider.name} timed out after {self.timeout_s}s") from exc
            raise ProviderCallError(f"Network error calling {provider.name}: {exc}") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise ProviderCallError(f"Connection to {provider.name} failed: {exc!r}") from exc

        if status != 200:
            raise ProviderCallError(f"{provider.name} API error: {status}")

        try:
            data = json.loads(text)
            return data["content"][0]["text"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
            raise MalformedPayloadError(f"{provider.name} returned an unexpected payload: {text[:200]}") from exc


ADAPTER_CLASSES = {
    "openai": OpenAICompatibleAdapter,
    "anthropic": AnthropicAdapter,
}


def build_adapters(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, ProviderAdapter]:
    """
    Build one adapter per provider that has a credential.

    Providers without a key get no adapter; the registry already marks them unavailable,
    so the selector will never pick them.

    Args:
        config (Dict[str, Any]): The application CONFIG mapping.
        environ (Optional[Mapping[str, str]]): Environment mapping; defaults to os.environ.

    Returns:
        Dict[str, ProviderAdapter]: Adapters keyed by provider name.
    """
    llm_cfg = config.get("llm", {}) or {}
    timeout_s = float(llm_cfg.get("timeout_s", 20.0))

    adapters: Dict[str, ProviderAdapter] = {}
    for entry in llm_cfg.get("providers", []):
        api_key = resolve_api_key(entry, environ)
        if not api_key:
            continue
        adapter_cls = ADAPTER_CLASSES[str(entry.get("api_style", "openai")).strip().lower()]
        adapters[str(entry["name"])] = adapter_cls(api_key=api_key, timeout_s=timeout_s)
    return adapters

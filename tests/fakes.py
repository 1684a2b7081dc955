"""
Test doubles shared by the test modules.

The fakes implement the same narrow interfaces as the real collaborators (provider
adapter, search client) so the orchestrator can be exercised end to end without any
network access.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from core.context import AssistantContext
from llm_cloud.adapters import ProviderAdapter
from services.offline_knowledge import OfflineKnowledgeBase
from services.session_memory import SessionMemory
from shared.models import Provider, ProviderSpecialty, SearchResponse, SearchResult

SYSTEM_PROMPT = "You are ParentGPT, a helpful parenting assistant."


def make_provider(
    name: str = "OpenAI",
    priority: int = 10,
    specialty: Optional[ProviderSpecialty] = None,
    credential_present: bool = True,
    api_style: str = "openai",
) -> Provider:
    return Provider(
        name=name,
        credential_present=credential_present,
        endpoint="https://example.invalid/v1",
        model="test-model",
        priority=priority,
        specialty=specialty,
        api_style=api_style,
    )


class FakeAdapter(ProviderAdapter):
    """Returns a fixed answer or raises a fixed error, recording every call."""

    def __init__(self, answer: str = "", error: Optional[Exception] = None):
        super().__init__(api_key="test-key", timeout_s=1.0)
        self.answer = answer
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []
        # Runs inside each call, e.g. to simulate the caller going away mid-request.
        self.on_call: Optional[Callable[[], None]] = None

    def _complete(self, system_prompt, user_prompt, provider):
        self.calls.append((system_prompt, user_prompt, provider.name))
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return self.answer


class FakeSearchClient:
    """Stands in for SerperSearchClient."""

    def __init__(self, results: Sequence[SearchResult] = (), summary: Optional[str] = None,
                 error: Optional[Exception] = None):
        self.response = SearchResponse(results=list(results), summary=summary)
        self.error = error
        self.queries: List[str] = []

    def search(self, query: str) -> SearchResponse:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.response


def trusted_result(title: str = "Fever in Children",
                   link: str = "https://www.healthychildren.org/English/health-issues/fever",
                   snippet: str = "When to call the pediatrician about a fever.") -> SearchResult:
    return SearchResult(title=title, link=link, snippet=snippet)


def make_context(
    providers: Sequence[Provider] = (),
    adapters=None,
    search_client=None,
    memory: Optional[SessionMemory] = None,
    video_configured: bool = False,
) -> AssistantContext:
    return AssistantContext(
        providers=tuple(providers),
        adapters=dict(adapters or {}),
        memory=memory or SessionMemory(),
        offline=OfflineKnowledgeBase(),
        search_client=search_client,
        system_prompt=SYSTEM_PROMPT,
        video_configured=video_configured,
    )

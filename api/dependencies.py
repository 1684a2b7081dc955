"""
api/dependencies.py

FastAPI dependency that provides the process-wide orchestrator.

The orchestrator and its AssistantContext (provider registry, adapters, session
memory, search client) are built once, on first use, from the global CONFIG.
Tests replace it through `app.dependency_overrides[get_orchestrator]`.
"""

from functools import lru_cache

from config import CONFIG
from core.context import build_assistant_context
from core.orchestrator import ParentingOrchestrator


@lru_cache(maxsize=1)
def get_orchestrator() -> ParentingOrchestrator:
    return ParentingOrchestrator(build_assistant_context(CONFIG))

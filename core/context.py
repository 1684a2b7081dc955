"""
core/context.py

The explicit dependency bundle handed to the orchestration pipeline.

Instead of module-level provider lists and memory maps, everything the pipeline reads
or writes lives on one AssistantContext: the immutable provider registry, the
adapters keyed by provider name, the session memory, the optional search client and
the offline knowledge base. Tests build a context from fakes; the application builds
one from configuration at startup.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from llm_cloud.adapters import ProviderAdapter, build_adapters
from llm_cloud.provider import build_provider_registry
from services.offline_knowledge import OfflineKnowledgeBase
from services.session_memory import SessionMemory
from shared.models import Provider
from shared.search_client import SerperSearchClient, build_search_client

logger = logging.getLogger(__name__)


@dataclass
class AssistantContext:
    providers: Tuple[Provider, ...]
    adapters: Dict[str, ProviderAdapter]
    memory: SessionMemory
    offline: OfflineKnowledgeBase
    search_client: Optional[SerperSearchClient] = None
    system_prompt: str = ""
    recent_exchanges: int = 3
    video_configured: bool = False


def build_assistant_context(config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> AssistantContext:
    """
    Build the application context from CONFIG and the process environment.

    Missing credentials never fail the build: providers are registered without a
    credential, the search client is left out and video stays off.

    Args:
        config (Dict[str, Any]): The application CONFIG mapping.
        environ (Optional[Mapping[str, str]]): Environment mapping; defaults to os.environ.

    Returns:
        AssistantContext: A ready context.
    """
    env = os.environ if environ is None else environ
    memory_cfg = config.get('memory', {}) or {}
    video_cfg = config.get('video', {}) or {}

    providers = build_provider_registry(config, env)
    adapters = build_adapters(config, env)
    search_client = build_search_client(config, env)
    video_configured = bool(
        env.get(video_cfg.get('api_key_env', 'TAVUS_API_KEY'))
        and env.get(video_cfg.get('replica_env', 'TAVUS_REPLICA_ID'))
    )

    context = AssistantContext(
        providers=providers,
        adapters=adapters,
        memory=SessionMemory(
            max_turns=int(memory_cfg.get('max_turns', 20)),
            context_chars=int(memory_cfg.get('context_chars', 200)),
        ),
        offline=OfflineKnowledgeBase(),
        search_client=search_client,
        system_prompt=config.get('parenting_system_prompt', ''),
        recent_exchanges=int(memory_cfg.get('recent_exchanges', 3)),
        video_configured=video_configured,
    )
    logger.info(
        "Assistant context ready: %d/%d providers with credentials, search=%s, video=%s",
        len(adapters), len(providers), search_client is not None, video_configured,
    )
    return context

"""
core/provider_selector.py

Provider selection policy.

Given the immutable provider registry and a question analysis, pick the backend that
should answer. The policy is a pure function of its inputs: providers without a
credential are ignored, the rest are ordered by priority (highest first, stable for
equal priorities), and a specialist is preferred when the analysis calls for one.

Specialist preferences are an ordered rule table. The first rule whose condition
holds picks its specialist; when that specialist is not available, or no rule
applies, the highest-priority provider answers.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from shared.models import EmotionalTone, Level, Provider, ProviderSpecialty, QuestionAnalysis

logger = logging.getLogger(__name__)

SPECIALTY_RULES: Sequence[Tuple[ProviderSpecialty, Callable[[QuestionAnalysis], bool]]] = (
    (ProviderSpecialty.EMPATHETIC,
     lambda a: a.requires_empathy or a.emotional_tone is EmotionalTone.DISTRESSED),
    (ProviderSpecialty.REASONING,
     lambda a: a.complexity is Level.HIGH or a.requires_factual_accuracy),
    (ProviderSpecialty.LOW_LATENCY,
     lambda a: a.urgency is Level.HIGH),
)


def available_providers(providers: Iterable[Provider]) -> List[Provider]:
    """Providers with a credential, highest priority first."""
    return sorted(
        (provider for provider in providers if provider.credential_present),
        key=lambda provider: provider.priority,
        reverse=True,
    )


def available_provider_names(providers: Iterable[Provider]) -> List[str]:
    return [provider.name for provider in available_providers(providers)]


def is_configured(providers: Iterable[Provider]) -> bool:
    """True when at least one provider has a credential."""
    return any(provider.credential_present for provider in providers)


class ProviderSelector:
    """Chooses the provider for a question; holds no state of its own."""

    def select(self, providers: Sequence[Provider], analysis: QuestionAnalysis) -> Optional[Provider]:
        """
        Select the provider that should answer.

        Args:
            providers (Sequence[Provider]): The provider registry.
            analysis (QuestionAnalysis): Classification of the current question.

        Returns:
            Optional[Provider]: The chosen provider, or None when no provider has a
            credential (the caller then answers offline).
        """
        candidates = available_providers(providers)
        if not candidates:
            logger.info("[ProviderSelector] No provider configured, answering offline")
            return None

        for specialty, applies in SPECIALTY_RULES:
            if not applies(analysis):
                continue
            for provider in candidates:
                if provider.specialty is specialty:
                    logger.info(
                        "[ProviderSelector] Selected %s as %s specialist", provider.name, specialty.value,
                        extra={'provider': provider.name},
                    )
                    return provider
            # Only the first applicable rule counts; without its specialist, priority decides.
            logger.debug("[ProviderSelector] No %s specialist available", specialty.value)
            break

        provider = candidates[0]
        logger.info("[ProviderSelector] Selected %s by priority", provider.name, extra={'provider': provider.name})
        return provider

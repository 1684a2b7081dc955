"""
core/orchestrator.py

Central pipeline orchestrator for answering parent questions.

This module contains the main coordination logic that:
1. Classifies incoming messages and answers greetings and small talk directly
2. Decides whether to augment the question with web search
3. Selects a provider and walks the generation fallback chain
4. Sanitizes and scores the answer, then records the exchange in session memory

The pipeline always returns an AIResponse. Collaborator failures lower the confidence
and switch the answer to an offline strategy; they never reach the caller.
"""

import random
import threading
import time
from typing import List, Optional, Tuple

from config.logging_config import get_logger
from llm_cloud.adapters import MalformedPayloadError, ProviderCallError
from monitoring.metrics import PIPELINE_PROCESSING_TIME
from services.search_augmenter import Augmentation, SearchAugmenter, should_augment
from services.session_memory import generate_interaction_id
from shared.models import (
    AIResponse,
    CallerContext,
    ConversationTurn,
    PromptResponse,
    Provider,
    QuestionAnalysis,
    QuestionType,
)
from shared.utils import truncate_message_for_logging

from .classifier import QuestionClassifier, categorize
from .confidence import ConfidenceScorer, build_reasoning
from .context import AssistantContext
from .fallback import FallbackStep, run_fallback_chain
from .media import recommend_media
from .prompt_composer import PromptComposer
from .provider_selector import ProviderSelector
from .sanitizer import ResponseSanitizer

logger = get_logger(__name__)

PIPELINE_NAME = "parenting_response"

GREETING_RESPONSES = (
    "👋 **Welcome to ParentGPT!**\n\n"
    "I'm here to help with all your parenting questions and concerns. Whether you're dealing "
    "with sleep issues, behavior challenges, feeding problems, or developmental milestones, "
    "I'm ready to provide practical, evidence-based guidance.\n\n"
    "**I can help with:**\n"
    "• Sleep training and bedtime routines\n"
    "• Behavior management and discipline\n"
    "• Feeding challenges and nutrition\n"
    "• Developmental milestones and concerns\n"
    "• Health and safety questions\n"
    "• School readiness and learning\n\n"
    "What parenting challenge can I help you with today?",

    "🌟 **Hello! I'm Your Parenting Assistant**\n\n"
    "I'm designed to provide helpful, practical advice for parents at every stage of the "
    "journey. From newborn care to teenage challenges, I'm here to support you with "
    "evidence-based guidance and empathetic support.\n\n"
    "**Popular topics I help with:**\n"
    "• Sleep problems and solutions\n"
    "• Tantrums and behavior issues\n"
    "• Picky eating and nutrition\n"
    "• Potty training guidance\n"
    "• Developmental concerns\n"
    "• Safety and health questions\n\n"
    "What's on your mind today? I'm here to help! 😊",
)

THANKS_RESPONSE = (
    "You're very welcome! 😊 I'm so glad I could help. Remember, parenting is challenging "
    "and you're doing great by seeking guidance. Feel free to ask me anything else!"
)
HOW_ARE_YOU_RESPONSE = (
    "I'm doing well, thank you for asking! 🌟 I'm here and ready to help with any parenting "
    "questions or concerns you might have. How are you doing with your parenting journey?"
)
CASUAL_RESPONSE = (
    "I appreciate you chatting with me! 💝 I'm always here when you need parenting support, "
    "advice, or just someone to listen. What would you like to talk about?"
)

GREETING_CONFIDENCE = 0.9
CASUAL_CONFIDENCE = 0.8
OFFLINE_WITH_SEARCH_CONFIDENCE = 0.7
DEGRADED_CONFIDENCE = 0.6
OFFLINE_CONFIDENCE = 0.6
CATCH_ALL_CONFIDENCE = 0.5


def handle_greeting() -> AIResponse:
    return AIResponse(
        response=random.choice(GREETING_RESPONSES),
        category="Greeting",
        has_web_search=False,
        is_online_response=False,
        confidence=GREETING_CONFIDENCE,
    )


def handle_casual(message: str) -> AIResponse:
    lower_message = message.lower().strip()
    if "thank" in lower_message or "thx" in lower_message:
        response = THANKS_RESPONSE
    elif "how are you" in lower_message:
        response = HOW_ARE_YOU_RESPONSE
    else:
        response = CASUAL_RESPONSE
    return AIResponse(
        response=response,
        category="Conversation",
        has_web_search=False,
        is_online_response=False,
        confidence=CASUAL_CONFIDENCE,
    )


class ParentingOrchestrator:
    """
    Runs one question through classification, augmentation, generation and memory.

    Responsibilities:
    - Fast-path replies for greetings and small talk (no search, no provider, no memory)
    - Optional web search when the question is urgent, factual, complex or about health
    - Provider selection and the ordered generation fallback chain
    - Recording the final question/answer pair in session memory

    All collaborators come from the AssistantContext, so one orchestrator can serve
    concurrent requests; nothing request-specific is stored on the instance.
    """

    def __init__(self, context: AssistantContext):
        """
        Initialize the orchestrator with its dependency context.

        Args:
            context (AssistantContext): Provider registry, adapters, memory, search and
                offline knowledge.
        """
        self.context = context
        self.classifier = QuestionClassifier()
        self.selector = ProviderSelector()
        self.augmenter = SearchAugmenter(context.search_client)
        self.composer = PromptComposer(context.system_prompt, categorize_fn=categorize)
        self.sanitizer = ResponseSanitizer()
        self.scorer = ConfidenceScorer()

        logger.info(
            "Initialized with %d providers, search %s",
            len(context.providers), "enabled" if self.augmenter.is_configured else "disabled",
        )

    def generate_parenting_response(self, question: str,
                                    caller_context: Optional[CallerContext] = None,
                                    cancelled: Optional[threading.Event] = None) -> AIResponse:
        """
        Main entry point: answer a parent's question.

        Args:
            question (str): The parent's message.
            caller_context (Optional[CallerContext]): Session id and optional UI hints.
            cancelled (Optional[threading.Event]): Set by the caller when it abandons the
                request; the exchange is then not written to session memory.

        Returns:
            AIResponse: Always a complete answer with a confidence in [0, 1].
        """
        response, _ = self._process(question, caller_context or CallerContext(), cancelled)
        return response

    def generate_prompt_response(self, question: str,
                                 caller_context: Optional[CallerContext] = None,
                                 cancelled: Optional[threading.Event] = None) -> PromptResponse:
        """Answer a question and attach the voice/video recommendation for the UI."""
        response, analysis = self._process(question, caller_context or CallerContext(), cancelled)
        media = recommend_media(analysis, response.response, self.context.video_configured)
        return PromptResponse(**response.model_dump(), media=media)

    def classify(self, question: str, caller_context: Optional[CallerContext] = None) -> QuestionAnalysis:
        return self.classifier.classify(question, caller_context)

    def _process(self, question: str, caller_context: CallerContext,
                 cancelled: Optional[threading.Event] = None) -> Tuple[AIResponse, QuestionAnalysis]:
        log = logger.bind(
            session_id=caller_context.session_id,
            pipeline_name=PIPELINE_NAME,
            interaction_id=generate_interaction_id(),
        )
        start_time = time.time()
        try:
            analysis = self.classifier.classify(question, caller_context)
            log.info(
                "Question classified",
                extra={
                    'category': analysis.category,
                    'extra_fields': {
                        'type': analysis.type.value,
                        'urgency': analysis.urgency.value,
                        'message_preview': truncate_message_for_logging(question, 50),
                    },
                },
            )

            # Fast paths: canned replies, nothing recorded in memory.
            if analysis.type is QuestionType.GREETING:
                return handle_greeting(), analysis
            if analysis.type is QuestionType.CASUAL:
                return handle_casual(question), analysis

            try:
                response = self._generate(question, caller_context, analysis, log)
            except Exception as e:
                log.error(
                    "Error generating answer, using offline fallback",
                    exc_info=True,
                    extra={'step': 'catch_all', 'error_type': type(e).__name__},
                )
                offline = self.context.offline.lookup(question)
                response = AIResponse(
                    response=offline.response,
                    category=offline.category,
                    has_web_search=False,
                    is_online_response=False,
                    provider="",
                    confidence=CATCH_ALL_CONFIDENCE,
                )

            # The pair is written only once the answer is final, and never for an abandoned request.
            if cancelled is not None and cancelled.is_set():
                log.info("Request abandoned by caller, exchange not recorded", extra={'step': 'memory'})
                return response, analysis
            self.context.memory.append_exchange(caller_context.session_id, question, response.response)
            log.info(
                "Answered question",
                extra={
                    'provider': response.provider or 'offline',
                    'extra_fields': {
                        'confidence': response.confidence,
                        'has_web_search': response.has_web_search,
                        'response_length': len(response.response),
                    },
                },
            )
            return response, analysis
        finally:
            PIPELINE_PROCESSING_TIME.labels(pipeline_name=PIPELINE_NAME).observe(time.time() - start_time)

    def _generate(self, question: str, caller_context: CallerContext,
                  analysis: QuestionAnalysis, log) -> AIResponse:
        memory_turns: List[ConversationTurn] = self.context.memory.recent(
            caller_context.session_id, 2 * self.context.recent_exchanges
        )

        augmentation = Augmentation()
        if should_augment(analysis) and self.augmenter.is_configured:
            augmentation = self.augmenter.augment(question, analysis, caller_context)

        provider = self.selector.select(self.context.providers, analysis)
        offline = self.context.offline.lookup(question)
        category = analysis.category

        def attempt_provider() -> AIResponse:
            return self._answer_with_provider(
                provider, question, caller_context, analysis, augmentation, memory_turns
            )

        def attempt_offline_with_search() -> AIResponse:
            return AIResponse(
                response=f"{offline.response}\n\n**Latest Research:**\n\n{augmentation.text}",
                category=category,
                has_web_search=True,
                is_online_response=True,
                provider="",
                # Reaching this step with a selected provider means the provider failed.
                confidence=DEGRADED_CONFIDENCE if provider is not None else OFFLINE_WITH_SEARCH_CONFIDENCE,
                reasoning=build_reasoning(None, True, False),
            )

        def attempt_offline() -> AIResponse:
            return AIResponse(
                response=offline.response,
                category=category,
                has_web_search=False,
                is_online_response=False,
                provider="",
                confidence=OFFLINE_CONFIDENCE,
            )

        steps = [
            FallbackStep("provider", lambda: provider is not None, attempt_provider),
            FallbackStep("offline_with_search", lambda: bool(augmentation.text), attempt_offline_with_search),
            FallbackStep("offline", lambda: True, attempt_offline),
        ]
        outcome = run_fallback_chain(steps, log=log)
        log.info("Answer produced by step %s", outcome.step, extra={'step': outcome.step})
        return outcome.result

    def _answer_with_provider(self, provider: Provider, question: str, caller_context: CallerContext,
                              analysis: QuestionAnalysis, augmentation: Augmentation,
                              memory_turns: List[ConversationTurn]) -> AIResponse:
        adapter = self.context.adapters.get(provider.name)
        if adapter is None:
            raise ProviderCallError(f"No adapter registered for {provider.name}")

        prompt = self.composer.compose(question, caller_context, analysis, augmentation.text, memory_turns)
        text = self.sanitizer.sanitize(adapter.call(prompt.system, prompt.user, provider))
        if not text:
            raise MalformedPayloadError(f"{provider.name} answer was empty after sanitizing")

        return AIResponse(
            response=text,
            category=analysis.category,
            has_web_search=augmentation.used,
            is_online_response=True,
            provider=provider.name,
            confidence=self.scorer.score(text, augmentation.used),
            reasoning=build_reasoning(provider.name, augmentation.used, bool(memory_turns)),
        )

"""
shared/models.py

Common data models and type definitions used across the orchestration engine.

This module contains the shared data structures that standardize communication
between the classifier, the provider selection policy, the search augmenter, the
session memory and the orchestrator. Internal records are plain dataclasses so the
decision logic stays cheap and easy to construct in tests. The records that cross
the HTTP boundary (the final AI response and the request body) are Pydantic models
so FastAPI can validate and serialize them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class QuestionType(Enum):
    """
    Conversational type of an incoming message.

    Exactly one type is assigned per message. Greeting and casual messages take a
    fast path with a canned reply; every other type flows through the full pipeline.
    """
    GREETING = "greeting"
    CASUAL = "casual"
    EMERGENCY = "emergency"
    COMPLEX = "complex"
    FACTUAL = "factual"
    EMOTIONAL = "emotional"
    GENERAL = "general"


class Level(Enum):
    """Three-step scale shared by complexity and urgency."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmotionalTone(Enum):
    NEUTRAL = "neutral"
    CONCERNED = "concerned"
    DISTRESSED = "distressed"
    POSITIVE = "positive"


class ProviderSpecialty(Enum):
    """
    Tag marking a provider as the preferred backend for a class of questions.

    - EMPATHETIC: emotional or distressed questions
    - REASONING: complex or accuracy-sensitive questions
    - LOW_LATENCY: urgent questions where speed matters most
    """
    EMPATHETIC = "empathetic"
    REASONING = "reasoning"
    LOW_LATENCY = "low_latency"


@dataclass(frozen=True)
class QuestionAnalysis:
    """
    Structured result of classifying one parent question.

    The analysis is computed per call and never stored. `matched_rules` lists the
    names of the rules that fired so every routing decision can be explained by the
    keyword or pattern responsible for it.
    """
    type: QuestionType
    complexity: Level
    emotional_tone: EmotionalTone
    category: str
    urgency: Level
    child_age: Optional[str] = None
    requires_empathy: bool = False
    requires_factual_accuracy: bool = False
    matched_rules: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the analysis into a JSON-friendly dictionary for logging and the classify endpoint.

        Returns:
            Dict[str, Any]: Enum members are rendered as their string values.
        """
        return {
            "type": self.type.value,
            "complexity": self.complexity.value,
            "emotionalTone": self.emotional_tone.value,
            "category": self.category,
            "urgency": self.urgency.value,
            "childAge": self.child_age,
            "requiresEmpathy": self.requires_empathy,
            "requiresFactualAccuracy": self.requires_factual_accuracy,
            "matchedRules": list(self.matched_rules),
        }


@dataclass(frozen=True)
class Provider:
    """
    Statically configured language-model backend.

    Built once at startup from configuration and the process environment, then
    never mutated. Only the presence of a credential is recorded here; the secret
    itself lives inside the adapter that needs it.
    """
    name: str
    credential_present: bool
    endpoint: str
    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    priority: int = 0
    specialty: Optional[ProviderSpecialty] = None
    api_style: str = "openai"


@dataclass
class SearchResult:
    title: str
    link: str
    snippet: str
    date: Optional[str] = None


@dataclass
class SearchResponse:
    """Raw output of the search collaborator before filtering."""
    results: List[SearchResult] = field(default_factory=list)
    summary: Optional[str] = None


@dataclass
class ConversationTurn:
    role: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CallerContext:
    """
    Hints supplied by the caller alongside the question.

    `session_id` keys the conversation memory. The optional fields come from the UI
    (for example a child profile) and take part in prompt composition and in the
    empathy decision.
    """
    session_id: str = "default"
    child_age: Optional[str] = None
    urgency: Optional[Level] = None
    category: Optional[str] = None


@dataclass
class OfflineAnswer:
    response: str
    category: str


class AIResponse(BaseModel):
    """
    Output contract of the orchestration pipeline.

    The pipeline always returns one of these, whatever happened to the external
    collaborators. Degradation is visible only through `is_online_response`, a
    lower `confidence` and the `reasoning` audit trail.
    """
    response: str = Field(..., min_length=1, description="Final answer text")
    category: str = Field(..., description="Topic category of the question")
    has_web_search: bool = Field(False, description="True when filtered search results were used")
    is_online_response: bool = Field(False, description="True when a provider or search contributed")
    provider: str = Field("", description="Name of the provider that answered, empty when offline")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Heuristic answer quality score")
    reasoning: Optional[str] = Field(None, description="Audit trail of routing decisions")


class PromptRequest(BaseModel):
    """Request body of POST /api/prompt."""
    message: str = Field(..., min_length=1, description="The parent's question")
    session_id: str = Field("default", description="Conversation key for session memory")
    child_age: Optional[str] = Field(None, description="Optional age bucket from the child profile")
    urgency: Optional[Level] = Field(None, description="Optional urgency hint from the caller")


class MediaRecommendation(BaseModel):
    """Whether the UI should offer voice playback or a video pediatrician for an answer."""
    offer_voice: bool = False
    offer_video: bool = False
    video_script: Optional[str] = None


class PromptResponse(AIResponse):
    """Response body of POST /api/prompt: the AI response plus media recommendation."""
    media: MediaRecommendation = Field(default_factory=MediaRecommendation)

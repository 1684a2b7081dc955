"""
core/classifier.py

Rule-based question classification for response routing.

This module is the single source of truth for how a parent's message is understood:
its conversational type, complexity, emotional tone, topic category, urgency and the
child's age bucket. Every decision is driven by ordered rule tables of
(tag, predicate) pairs evaluated top to bottom, first match wins. The tables are
plain module-level data so they can be inspected and tested on their own, and the
public helpers `categorize`, `determine_urgency` and `extract_child_age` read the
very same tables the classifier uses.

Classification is deterministic and performs no I/O.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from shared.models import CallerContext, EmotionalTone, Level, QuestionAnalysis, QuestionType

logger = logging.getLogger(__name__)

T = TypeVar("T")
Predicate = Callable[[str], bool]


def keywords(*words: str) -> Predicate:
    """Predicate that fires when any keyword occurs as a substring of the lower-cased text."""
    def predicate(text: str) -> bool:
        return any(word in text for word in words)
    return predicate


def patterns(*regexes: str) -> Predicate:
    """Predicate that fires when any regex matches the lower-cased, trimmed text."""
    compiled = [re.compile(regex, re.IGNORECASE) for regex in regexes]

    def predicate(text: str) -> bool:
        return any(regex.search(text) for regex in compiled)
    return predicate


_GREETING_WORDS = r"(hi|hello|hey|good morning|good afternoon|good evening|good night)"

is_greeting = patterns(
    rf"^{_GREETING_WORDS}$",
    rf"^{_GREETING_WORDS}\s*[!.]*$",
    r"^(hi|hello|hey)\s+(there|parentgpt)$",
    r"^good\s+(morning|afternoon|evening|night)$",
    r"^(howdy|greetings|what's up|whats up|sup)$",
    r"^how\s+(are\s+you|is\s+it\s+going)$",
    r"^(i'm|im)\s+new\s+(here|to\s+this)$",
    r"^first\s+time\s+(here|using\s+this)$",
)

is_casual = patterns(
    r"^(thank\s+you|thanks|thx)$",
    r"^(thank\s+you|thanks)\s+(so\s+much|very\s+much)$",
    r"^how\s+are\s+you(\s+doing)?$",
    r"^(that\s+was\s+helpful|that\s+helped|great\s+advice)$",
    r"^(you're\s+amazing|youre\s+amazing|this\s+is\s+great)$",
    r"^(ok|okay|got\s+it|i\s+see|understood)$",
    r"^(yes|no|maybe|sure)$",
    r"^(bye|goodbye|see\s+you|talk\s+to\s+you\s+later|ttyl)$",
    r"^(have\s+a\s+good\s+day|have\s+a\s+great\s+day)$",
)

is_emergency = keywords(
    "emergency", "urgent", "help", "dangerous", "hurt", "bleeding", "choking",
    "can't breathe", "difficulty breathing", "unconscious", "severe pain",
    "high fever", "dehydrated", "allergic reaction", "poisoned", "swallowed",
)

is_complex = keywords(
    "multiple", "several", "different", "various", "complex", "complicated",
    "relationship", "balance", "manage", "handle", "deal with", "struggle",
    "both", "either", "neither", "however", "although", "despite",
)

is_factual = keywords(
    "what is", "how much", "how many", "when should", "what age", "normal",
    "typical", "average", "recommended", "guidelines", "research", "studies",
    "evidence", "facts", "statistics",
)

is_emotional = keywords(
    "worried", "concerned", "anxious", "stressed", "overwhelmed", "frustrated",
    "upset", "scared", "afraid", "confused", "feel", "feeling", "emotion",
    "cry", "crying", "difficult",
)

# Conversational type, highest precedence first. Greeting and casual messages win
# even when an emergency keyword is also present.
TYPE_RULES: Sequence[Tuple[QuestionType, Predicate]] = (
    (QuestionType.GREETING, is_greeting),
    (QuestionType.CASUAL, is_casual),
    (QuestionType.EMERGENCY, is_emergency),
    (QuestionType.COMPLEX, is_complex),
    (QuestionType.FACTUAL, is_factual),
    (QuestionType.EMOTIONAL, is_emotional),
)

TONE_RULES: Sequence[Tuple[EmotionalTone, Predicate]] = (
    (EmotionalTone.DISTRESSED, keywords("desperate", "exhausted", "overwhelmed", "can't handle", "breaking down")),
    (EmotionalTone.CONCERNED, keywords("worried", "concerned", "anxious", "unsure", "confused")),
    (EmotionalTone.POSITIVE, keywords("excited", "happy", "proud", "grateful", "wonderful")),
)

DEFAULT_CATEGORY = "General Parenting"

CATEGORY_RULES: Sequence[Tuple[str, Predicate]] = (
    ("Greeting", is_greeting),
    ("Conversation", is_casual),
    ("Emergency", keywords("emergency", "urgent")),
    ("Sleep", keywords("sleep", "bedtime", "nap", "waking", "wake", "night")),
    ("Behavior", keywords("behavior", "tantrum", "discipline")),
    ("Feeding", keywords("eat", "food", "feed", "nutrition")),
    ("Development", keywords("develop", "milestone", "learn")),
    ("Potty Training", keywords("potty", "toilet")),
    ("Screen Time", keywords("screen", "tv", "tablet")),
    ("Safety", keywords("safe", "danger", "accident")),
    ("Health", keywords("sick", "health", "doctor")),
    ("Education", keywords("school", "education", "learning")),
    ("Siblings", keywords("sibling", "brother", "sister")),
)

URGENCY_RULES: Sequence[Tuple[Level, Predicate]] = (
    (Level.LOW, lambda text: is_greeting(text) or is_casual(text)),
    (Level.HIGH, keywords(
        "emergency", "urgent", "help", "dangerous", "hurt", "bleeding", "choking",
        "can't breathe", "difficulty breathing", "unconscious", "severe pain",
        "high fever", "dehydrated", "allergic reaction",
    )),
    (Level.MEDIUM, keywords(
        "worried", "concerned", "problem", "issue", "trouble", "won't", "refuses",
        "crying", "upset", "difficult", "struggling",
    )),
)

AGE_RULES: Sequence[Tuple[str, Predicate]] = (
    ("newborn", patterns(r"newborn|0.{0,5}month")),
    ("infant", patterns(r"(\d+).{0,5}month")),
    ("toddler", patterns(r"toddler|1.{0,5}year|2.{0,5}year")),
    ("preschooler", patterns(r"preschool|3.{0,5}year|4.{0,5}year|5.{0,5}year")),
    ("school-age", patterns(r"school.{0,5}age|6.{0,5}year|7.{0,5}year|8.{0,5}year")),
    ("teenager", patterns(r"teen|adolescent|13|14|15|16|17")),
)

COMPLEXITY_TOPICS = ("sleep", "behavior", "feeding", "development", "health")


def first_match(rules: Iterable[Tuple[T, Predicate]], text: str) -> Optional[T]:
    """Return the tag of the first rule whose predicate fires, or None."""
    for tag, predicate in rules:
        if predicate(text):
            return tag
    return None


def _normalize(question: str) -> str:
    return (question or "").strip().lower()


def categorize(question: str) -> str:
    """Topic category of a question, "General Parenting" when nothing matches."""
    return first_match(CATEGORY_RULES, _normalize(question)) or DEFAULT_CATEGORY


def determine_urgency(question: str) -> Level:
    """Urgency level of a question; greetings and small talk are always low."""
    return first_match(URGENCY_RULES, _normalize(question)) or Level.LOW


def extract_child_age(question: str) -> Optional[str]:
    """
    Age bucket mentioned in a question.

    Returns one of newborn, infant, toddler, preschooler, school-age, teenager, or None
    when no age hint is found.
    """
    return first_match(AGE_RULES, _normalize(question))


def score_complexity(text: str) -> Tuple[Level, List[str]]:
    """
    Additive complexity score over the lower-cased text.

    One point each for length over 100, length over 200, more than one question mark,
    a complexity indicator, and more than one core parenting topic. Three or more
    points is high, at least one is medium.
    """
    signals = []
    if len(text) > 100:
        signals.append("complexity:length>100")
    if len(text) > 200:
        signals.append("complexity:length>200")
    if len(text.split("?")) > 2:
        signals.append("complexity:multiple_questions")
    if is_complex(text):
        signals.append("complexity:indicator")
    if sum(1 for topic in COMPLEXITY_TOPICS if topic in text) > 1:
        signals.append("complexity:multiple_topics")

    if len(signals) >= 3:
        return Level.HIGH, signals
    if len(signals) >= 1:
        return Level.MEDIUM, signals
    return Level.LOW, signals


class QuestionClassifier:
    """
    Stateless classifier that turns a raw parent question into a QuestionAnalysis.

    The analysis records which rules fired in `matched_rules`, so a routing decision
    further down the pipeline can always be traced back to a keyword table entry.
    """

    def classify(self, question: str, caller_context: Optional[CallerContext] = None) -> QuestionAnalysis:
        """
        Classify a question.

        Args:
            question (str): The raw message as typed by the parent.
            caller_context (Optional[CallerContext]): Caller hints. A caller-supplied high
                urgency makes the answer require empathy; a caller-supplied child age is
                used when the question itself carries no age hint.

        Returns:
            QuestionAnalysis: The full classification, including the names of the rules
            that fired.
        """
        text = _normalize(question)
        matched: List[str] = []

        question_type = first_match(TYPE_RULES, text) or QuestionType.GENERAL
        matched.append(f"type:{question_type.value}")

        complexity, complexity_signals = score_complexity(text)
        matched.extend(complexity_signals)

        tone = first_match(TONE_RULES, text) or EmotionalTone.NEUTRAL
        if tone is not EmotionalTone.NEUTRAL:
            matched.append(f"tone:{tone.value}")

        category = first_match(CATEGORY_RULES, text) or DEFAULT_CATEGORY
        matched.append(f"category:{category}")

        urgency = first_match(URGENCY_RULES, text) or Level.LOW
        if urgency is not Level.LOW:
            matched.append(f"urgency:{urgency.value}")

        child_age = first_match(AGE_RULES, text)
        if child_age:
            matched.append(f"age:{child_age}")
        elif caller_context and caller_context.child_age:
            child_age = caller_context.child_age
            matched.append("age:caller_context")

        caller_urgency_high = bool(caller_context and caller_context.urgency is Level.HIGH)
        requires_empathy = question_type is QuestionType.EMOTIONAL or caller_urgency_high
        requires_factual_accuracy = is_factual(text) or is_emergency(text)

        analysis = QuestionAnalysis(
            type=question_type,
            complexity=complexity,
            emotional_tone=tone,
            category=category,
            urgency=urgency,
            child_age=child_age,
            requires_empathy=requires_empathy,
            requires_factual_accuracy=requires_factual_accuracy,
            matched_rules=tuple(matched),
        )
        logger.debug("[QuestionClassifier] %s", analysis.to_dict())
        return analysis

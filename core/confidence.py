"""
core/confidence.py

Heuristic confidence score and the reasoning audit trail of an answer.

The score is not a calibrated probability. It summarizes a few quality signals of the
final text (length, evidence wording, structured formatting) and whether fresh search
results were used.
"""

from typing import List, Optional

BASE_CONFIDENCE = 0.7
MAX_CONFIDENCE = 0.95


class ConfidenceScorer:

    def score(self, response: str, search_used: bool) -> float:
        """
        Score a sanitized answer.

        Base 0.7, plus 0.1 for more than 300 characters, 0.1 for mentioning research or
        a study, 0.1 when search results were used, and 0.05 for markdown bold combined
        with bullets. Capped at 0.95.
        """
        text = response or ""
        lowered = text.lower()

        confidence = BASE_CONFIDENCE
        if len(text) > 300:
            confidence += 0.1
        if "research" in lowered or "study" in lowered:
            confidence += 0.1
        if search_used:
            confidence += 0.1
        if "**" in text and "•" in text:
            confidence += 0.05

        return round(max(0.0, min(confidence, MAX_CONFIDENCE)), 4)


def build_reasoning(provider_name: Optional[str], search_used: bool, history_used: bool) -> Optional[str]:
    """Audit trail of the routing decisions behind an answer, or None when there is nothing to report."""
    parts: List[str] = []
    if provider_name:
        parts.append(f"Selected {provider_name} for optimal response quality")
    if search_used:
        parts.append("Enhanced with latest research and expert sources")
    if history_used:
        parts.append("Considered conversation history for personalized guidance")
    return "; ".join(parts) or None

"""
core/media.py

Voice and video recommendations for an answer.

The assistant never calls a speech or video service itself. It only tells the UI
whether offering voice playback or a handoff to the video pediatrician makes sense
for a given answer, and prepares the spoken script for the video service: markdown,
bullets and emoji stripped, an urgency-specific opening and a closing reminder to
consult the child's pediatrician.
"""

import re

from shared.models import Level, MediaRecommendation, QuestionAnalysis, QuestionType

VIDEO_CATEGORIES = ("Health", "Emergency")

URGENCY_PREFIX = {
    Level.LOW: "I want to share some helpful guidance with you about your parenting question.",
    Level.MEDIUM: "I understand your concern, and I'm here to provide you with important information.",
    Level.HIGH: "This is important medical guidance that requires your immediate attention.",
}

PEDIATRICIAN_REMINDER = (
    "Remember, I'm here to support you, but always consult with your child's "
    "pediatrician for personalized medical advice."
)

_EMOJI = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF\uFE0F\u200D]")
_HEADER = re.compile(r"#{1,6}\s")


def build_video_script(text: str, urgency: Level) -> str:
    """Turn a markdown answer into plain sentences suitable for a talking-head video."""
    clean = text.replace("**", "")
    clean = _HEADER.sub("", clean)
    clean = clean.replace("•", "")
    clean = _EMOJI.sub("", clean)
    clean = clean.replace("\n\n", ". ").replace("\n", " ")
    clean = re.sub(r"\s+", " ", clean).strip()
    return f"{URGENCY_PREFIX[urgency]} {clean}. {PEDIATRICIAN_REMINDER}"


def recommend_media(analysis: QuestionAnalysis, response: str, video_configured: bool) -> MediaRecommendation:
    """
    Decide which media options the UI should offer for an answer.

    Voice playback is offered for every substantive answer. The video pediatrician is
    offered only when the video service is configured and the question is about health,
    an emergency, or is urgent.
    """
    if analysis.type in (QuestionType.GREETING, QuestionType.CASUAL):
        return MediaRecommendation()

    offer_video = video_configured and (
        analysis.category in VIDEO_CATEGORIES or analysis.urgency is Level.HIGH
    )
    return MediaRecommendation(
        offer_voice=True,
        offer_video=offer_video,
        video_script=build_video_script(response, analysis.urgency) if offer_video else None,
    )

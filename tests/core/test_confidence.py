"""
Unit tests for `core/confidence.py` – confidence heuristics and reasoning text.
"""

import pytest

from core.confidence import ConfidenceScorer, build_reasoning

scorer = ConfidenceScorer()


def test_base_score():
    assert scorer.score("Short answer.", search_used=False) == pytest.approx(0.7)


def test_each_signal_adds_to_the_score():
    assert scorer.score("x" * 301, search_used=False) == pytest.approx(0.8)
    assert scorer.score("Recent research shows routines help.", search_used=False) == pytest.approx(0.8)
    assert scorer.score("A Study found this.", search_used=False) == pytest.approx(0.8)
    assert scorer.score("Short answer.", search_used=True) == pytest.approx(0.8)
    assert scorer.score("**Tips**\n• rest", search_used=False) == pytest.approx(0.75)


def test_score_is_capped():
    rich = "**Research-backed tips**\n• " + "keep a routine " * 30
    assert scorer.score(rich, search_used=True) == pytest.approx(0.95)


@pytest.mark.parametrize("text", ["", "•", "**", "research " * 100])
def test_score_always_within_bounds(text):
    for search_used in (True, False):
        assert 0.0 <= scorer.score(text, search_used) <= 1.0


def test_reasoning_lists_decisions_in_order():
    reasoning = build_reasoning("DeepSeek", search_used=True, history_used=True)
    assert reasoning == (
        "Selected DeepSeek for optimal response quality; "
        "Enhanced with latest research and expert sources; "
        "Considered conversation history for personalized guidance"
    )


def test_reasoning_is_none_without_decisions():
    assert build_reasoning(None, search_used=False, history_used=False) is None

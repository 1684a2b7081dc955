"""
Unit tests for `core/classifier.py` – rule-based question classification.

The classifier is deterministic and performs no I/O, so these tests call it directly with representative
parent questions. They cover the conversational type (including the greeting and small-talk fast paths),
complexity scoring, emotional tone, topic category, urgency and age-bucket extraction, plus the module-level
helpers that reuse the same rule tables.
"""

import unittest

import pytest

from core.classifier import (
    CATEGORY_RULES,
    QuestionClassifier,
    categorize,
    determine_urgency,
    extract_child_age,
    first_match,
)
from shared.models import CallerContext, EmotionalTone, Level, QuestionType


class TestQuestionClassifier(unittest.TestCase):
    """
    Tests for `QuestionClassifier.classify`.

    Each test checks one dimension of the analysis so a failing rule table points at a single test.
    """

    def setUp(self):
        self.classifier = QuestionClassifier()

    def test_greetings_are_detected(self):
        for message in ("hi", "hello there", "Good morning!", "hey parentgpt", "I'm new here"):
            with self.subTest(message=message):
                self.assertEqual(self.classifier.classify(message).type, QuestionType.GREETING)

    def test_small_talk_is_casual(self):
        for message in ("thanks", "Thank you so much", "ok", "bye", "have a great day"):
            with self.subTest(message=message):
                self.assertEqual(self.classifier.classify(message).type, QuestionType.CASUAL)

    def test_greeting_takes_precedence_over_casual(self):
        """'how are you' matches both tables; the greeting table is consulted first."""
        self.assertEqual(self.classifier.classify("how are you").type, QuestionType.GREETING)

    def test_greeting_patterns_match_whole_message_only(self):
        analysis = self.classifier.classify("hi, my toddler won't nap")
        self.assertNotEqual(analysis.type, QuestionType.GREETING)
        self.assertEqual(analysis.category, "Sleep")

    def test_emergency_type_and_flags(self):
        analysis = self.classifier.classify("My baby is choking on a grape")
        self.assertEqual(analysis.type, QuestionType.EMERGENCY)
        self.assertEqual(analysis.urgency, Level.HIGH)
        self.assertTrue(analysis.requires_factual_accuracy)

    def test_factual_question(self):
        analysis = self.classifier.classify("What is the recommended amount of sleep for a toddler?")
        self.assertEqual(analysis.type, QuestionType.FACTUAL)
        self.assertTrue(analysis.requires_factual_accuracy)
        self.assertFalse(analysis.requires_empathy)

    def test_emotional_question_requires_empathy(self):
        analysis = self.classifier.classify("I feel so frustrated with bath time")
        self.assertEqual(analysis.type, QuestionType.EMOTIONAL)
        self.assertTrue(analysis.requires_empathy)

    def test_caller_high_urgency_requires_empathy(self):
        context = CallerContext(session_id="s1", urgency=Level.HIGH)
        analysis = self.classifier.classify("My toddler won't nap", context)
        self.assertTrue(analysis.requires_empathy)

    def test_general_question_defaults(self):
        analysis = self.classifier.classify("My 2-year-old has been waking up at night")
        self.assertEqual(analysis.type, QuestionType.GENERAL)
        self.assertEqual(analysis.category, "Sleep")
        self.assertEqual(analysis.urgency, Level.LOW)
        self.assertEqual(analysis.child_age, "toddler")
        self.assertEqual(analysis.emotional_tone, EmotionalTone.NEUTRAL)
        self.assertFalse(analysis.requires_empathy)
        self.assertFalse(analysis.requires_factual_accuracy)

    def test_complexity_levels(self):
        self.assertEqual(self.classifier.classify("My toddler won't nap").complexity, Level.LOW)
        self.assertEqual(self.classifier.classify("How do I manage bedtime").complexity, Level.MEDIUM)
        long_question = (
            "How do I balance sleep and feeding schedules? And what about health checkups? "
            "Is development on track?"
        )
        self.assertEqual(self.classifier.classify(long_question).complexity, Level.HIGH)

    def test_emotional_tone(self):
        cases = {
            "I'm exhausted and desperate": EmotionalTone.DISTRESSED,
            "I'm worried about my baby": EmotionalTone.CONCERNED,
            "I'm so proud of my daughter": EmotionalTone.POSITIVE,
            "My toddler won't nap": EmotionalTone.NEUTRAL,
        }
        for message, tone in cases.items():
            with self.subTest(message=message):
                self.assertEqual(self.classifier.classify(message).emotional_tone, tone)

    def test_caller_child_age_used_when_question_has_none(self):
        context = CallerContext(session_id="s1", child_age="preschooler")
        analysis = self.classifier.classify("How do I handle tantrums?", context)
        self.assertEqual(analysis.child_age, "preschooler")
        self.assertIn("age:caller_context", analysis.matched_rules)

    def test_matched_rules_explain_decisions(self):
        analysis = self.classifier.classify("My toddler won't nap")
        self.assertIn("type:general", analysis.matched_rules)
        self.assertIn("category:Sleep", analysis.matched_rules)
        self.assertIn("urgency:medium", analysis.matched_rules)
        self.assertIn("age:toddler", analysis.matched_rules)

    def test_to_dict_uses_plain_values(self):
        payload = self.classifier.classify("hi").to_dict()
        self.assertEqual(payload["type"], "greeting")
        self.assertEqual(payload["category"], "Greeting")
        self.assertEqual(payload["urgency"], "low")


@pytest.mark.parametrize("question, category", [
    ("My toddler won't nap", "Sleep"),
    ("How do I start potty training?", "Potty Training"),
    ("My 2-year-old has been waking up at night", "Sleep"),
    ("How should I discipline my son?", "Behavior"),
    ("My son hits his sister", "Siblings"),
    ("How much tablet use is okay?", "Screen Time"),
    ("This is an emergency", "Emergency"),
    ("What should I do?", "General Parenting"),
    ("hi", "Greeting"),
    ("thanks", "Conversation"),
])
def test_categorize(question, category):
    assert categorize(question) == category


def test_category_table_order_is_first_match():
    # "bedtime tantrum" matches Sleep and Behavior; Sleep comes first in the table.
    assert first_match(CATEGORY_RULES, "bedtime tantrum") == "Sleep"


@pytest.mark.parametrize("question, urgency", [
    ("my child is bleeding and can't breathe", Level.HIGH),
    ("my child refuses vegetables", Level.MEDIUM),
    ("hi", Level.LOW),
    ("thanks", Level.LOW),
    ("What games build motor skills?", Level.LOW),
])
def test_determine_urgency(question, urgency):
    assert determine_urgency(question) == urgency


@pytest.mark.parametrize("question, age", [
    ("My newborn won't latch", "newborn"),
    ("My 9 month old is teething", "infant"),
    ("My 2-year-old bites", "toddler"),
    ("my 4 year old lies", "preschooler"),
    ("My 7 year old hates reading", "school-age"),
    ("My teenager ignores me", "teenager"),
    ("What should I do?", None),
])
def test_extract_child_age(question, age):
    assert extract_child_age(question) == age

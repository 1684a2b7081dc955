"""
Offline knowledge base: canned, vetted answers keyed by topic category.

This is the collaborator of last resort. It needs no network and no credentials, so
the orchestrator can always produce an answer even when every provider and the
search backend are unavailable. Answers are loaded once from
`config/offline_answers.json`.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from core.classifier import DEFAULT_CATEGORY, categorize
from shared.models import OfflineAnswer

logger = logging.getLogger(__name__)

OFFLINE_ANSWERS_PATH = Path(__file__).resolve().parents[1] / 'config' / 'offline_answers.json'


def load_offline_answers(path: Path = OFFLINE_ANSWERS_PATH) -> Dict[str, str]:
    """Load the canned answer table (category name to markdown answer)."""
    with open(path, 'r', encoding='utf-8') as f:
        answers = json.load(f)
    logger.info("Loaded %d offline answers from %s", len(answers), path)
    return answers


class OfflineKnowledgeBase:
    """
    Canned-answer lookup by question category. `lookup` never raises.

    Args:
        answers (Optional[Dict[str, str]]): Category to answer text; loaded from disk when None.
        categorize_fn (Callable[[str], str]): Maps a question to its category.
    """

    def __init__(self, answers: Optional[Dict[str, str]] = None,
                 categorize_fn: Callable[[str], str] = categorize):
        self.answers = answers if answers is not None else load_offline_answers()
        if not self.answers.get(DEFAULT_CATEGORY):
            raise ValueError(f"Offline answers need a non-empty '{DEFAULT_CATEGORY}' entry")
        self.categorize = categorize_fn

    def lookup(self, question: str) -> OfflineAnswer:
        category = self.categorize(question)
        # Greetings and small talk reaching this point get the general answer.
        response = self.answers.get(category) or self.answers[DEFAULT_CATEGORY]
        return OfflineAnswer(response=response, category=category)

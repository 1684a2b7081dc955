"""
Search augmentation policy: when to search, what to search for, and which results to trust.

The augmenter sits between the orchestrator and the search client. It decides whether
a question benefits from live web results, rewrites the question into a query tuned
for recent pediatric guidance, and filters the raw hits down to a handful of
trustworthy, non-commercial sources before they are shown to a provider or appended
to an offline answer.

Any failure of the search client is absorbed here: the caller always gets an
Augmentation back, empty when search was skipped or failed.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from shared.errors import AssistantError
from shared.models import CallerContext, Level, QuestionAnalysis, QuestionType, SearchResult
from shared.search_client import SerperSearchClient
from shared.utils import display_domain, extract_hostname, truncate_message_for_logging

logger = logging.getLogger(__name__)

MAX_FILTERED_RESULTS = 5

TRUSTED_DOMAINS = (
    "aap.org", "healthychildren.org", "cdc.gov", "mayoclinic.org", "webmd.com",
    "babycenter.com", "whattoexpect.com", "parents.com", "verywellfamily.com",
    "kidshealth.org", "zerotothree.org", "childmind.org", "nih.gov", "acog.org",
    "brightfutures.aap.org",
)

SPAM_KEYWORDS = (
    "buy", "sale", "discount", "coupon", "affiliate", "sponsored", "advertisement",
    "product review", "best deals",
)

EDUCATIONAL_KEYWORDS = ("development", "pediatric", "research", "study")

FRESHNESS_SUFFIX = "latest research pediatric guidelines"
AUTHORITY_SUFFIX = "AAP CDC medical expert advice"


@dataclass
class Augmentation:
    """Filtered search results plus their rendered text block; empty when nothing was found."""
    results: List[SearchResult] = field(default_factory=list)
    summary: Optional[str] = None
    text: str = ""

    @property
    def used(self) -> bool:
        return bool(self.results)


def should_augment(analysis: QuestionAnalysis) -> bool:
    """True when the question is urgent, factual, complex or about health."""
    return (
        analysis.urgency is Level.HIGH
        or analysis.requires_factual_accuracy
        or analysis.complexity is Level.HIGH
        or analysis.category == "Health"
        or analysis.type is QuestionType.FACTUAL
    )


def optimize_query(question: str, caller_context: Optional[CallerContext] = None,
                   child_age: Optional[str] = None, today: Optional[date] = None) -> str:
    """
    Rewrite a question into a search query biased toward fresh, authoritative sources.

    Args:
        question (str): The parent's question.
        caller_context (Optional[CallerContext]): Supplies the child's age when known.
        child_age (Optional[str]): Age bucket from the classifier, used when the caller
            gave none.
        today (Optional[date]): Reference date for the year tokens; defaults to today.

    Returns:
        str: Question, optional age, year tokens and authority tokens.
    """
    query = question.strip()
    age = (caller_context.child_age if caller_context else None) or child_age
    if age:
        query += f" {age}"

    year = (today or date.today()).year
    query += f" {year} {year + 1} {FRESHNESS_SUFFIX}"
    query += f" {AUTHORITY_SUFFIX}"
    return query


def _is_trusted(link: str) -> bool:
    host = extract_hostname(link)
    return bool(host) and any(domain in host for domain in TRUSTED_DOMAINS)


def filter_results(raw: Sequence[SearchResult]) -> List[SearchResult]:
    """
    Keep trusted or educational results that carry no commercial signal.

    A result is kept when its host is on the trusted-domain list or its snippet has an
    educational keyword, and neither its title nor its snippet has a spam keyword.
    Input order is preserved and at most five results are returned. Links that cannot
    be parsed count as untrusted.
    """
    kept: List[SearchResult] = []
    for result in raw:
        title = (result.title or "").lower()
        snippet = (result.snippet or "").lower()

        if any(spam in title or spam in snippet for spam in SPAM_KEYWORDS):
            continue
        if not (_is_trusted(result.link) or any(word in snippet for word in EDUCATIONAL_KEYWORDS)):
            continue

        kept.append(result)
        if len(kept) >= MAX_FILTERED_RESULTS:
            break
    return kept


def format_results(results: Sequence[SearchResult], summary: Optional[str] = None) -> str:
    """Render results as a markdown block with numbered titles and bare source domains."""
    if not results and not summary:
        return ""

    text = ""
    if summary:
        text += f"**Latest Information:**\n{summary}\n\n"
    if results:
        text += "**Recent Research & Expert Sources:**\n"
        for index, result in enumerate(results, start=1):
            text += f"{index}. **{result.title}** ({display_domain(result.link)})\n"
            text += f"   {result.snippet}\n\n"
    return text.strip()


class SearchAugmenter:
    """
    Runs the search collaborator for a question and returns filtered, formatted results.

    Args:
        search_client (Optional[SerperSearchClient]): The search collaborator, or None when
            search is not configured.
    """

    def __init__(self, search_client: Optional[SerperSearchClient]):
        self.search_client = search_client

    @property
    def is_configured(self) -> bool:
        return self.search_client is not None

    def augment(self, question: str, analysis: QuestionAnalysis,
                caller_context: Optional[CallerContext] = None) -> Augmentation:
        if self.search_client is None:
            return Augmentation()

        query = optimize_query(question, caller_context, child_age=analysis.child_age)
        try:
            raw = self.search_client.search(query)
        except AssistantError as e:
            logger.warning(
                "Web search failed, continuing without results: %s", e,
                extra={'step': 'search', 'error_type': type(e).__name__},
            )
            return Augmentation()
        except Exception as e:
            logger.error(
                "Unexpected web search error, continuing without results: %s", e,
                exc_info=True,
                extra={'step': 'search', 'error_type': type(e).__name__},
            )
            return Augmentation()

        results = filter_results(raw.results)
        logger.info(
            "Web search kept %d of %d results for '%s'",
            len(results), len(raw.results), truncate_message_for_logging(query, 60),
        )
        if not results:
            return Augmentation(summary=raw.summary)
        return Augmentation(results=results, summary=raw.summary, text=format_results(results, raw.summary))

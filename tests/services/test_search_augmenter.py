"""
Unit tests for `services/search_augmenter.py` – augmentation policy, query rewriting and result filtering.
"""

from datetime import date

import pytest

from core.classifier import QuestionClassifier
from services.search_augmenter import (
    AUTHORITY_SUFFIX,
    SearchAugmenter,
    filter_results,
    format_results,
    optimize_query,
    should_augment,
)
from shared.models import CallerContext, SearchResult
from shared.search_client import SearchClientError, SearchPayloadError
from tests.fakes import FakeSearchClient, trusted_result

classifier = QuestionClassifier()


@pytest.mark.parametrize("question, expected", [
    ("My toddler has a high fever, should I call the doctor?", True),
    ("What is the recommended amount of sleep for a baby?", True),
    ("Is my son sick or just tired?", True),
    ("My 2-year-old has been waking up at night", False),
])
def test_should_augment(question, expected):
    assert should_augment(classifier.classify(question)) is expected


def test_optimize_query_adds_age_year_and_authority():
    query = optimize_query("How much should my baby eat?", child_age="infant", today=date(2025, 3, 1))
    assert query == (
        "How much should my baby eat? infant 2025 2026 latest research pediatric guidelines "
        f"{AUTHORITY_SUFFIX}"
    )


def test_optimize_query_prefers_caller_age():
    query = optimize_query("Tantrums?", CallerContext(child_age="toddler"), child_age="infant",
                           today=date(2025, 3, 1))
    assert query.startswith("Tantrums? toddler 2025")


def test_filter_drops_commercial_results():
    results = [
        SearchResult(title="Baby gear", link="https://shop.example.com/a", snippet="50% off baby sale today"),
        trusted_result(),
    ]
    assert filter_results(results) == [results[1]]


def test_filter_drops_spam_even_on_trusted_domain():
    result = trusted_result(title="Sponsored: best strollers")
    assert filter_results([result]) == []


def test_filter_keeps_educational_snippet_from_unknown_domain():
    result = SearchResult(title="Sleep", link="https://blog.example.com/sleep",
                          snippet="A new study on toddler sleep")
    assert filter_results([result]) == [result]


def test_filter_drops_unknown_non_educational_and_broken_links():
    results = [
        SearchResult(title="Opinion", link="https://blog.example.com/x", snippet="My thoughts on naps"),
        SearchResult(title="Broken", link="not a url", snippet="Naps"),
    ]
    assert filter_results(results) == []


def test_filter_caps_results_and_keeps_order():
    results = [trusted_result(title=f"Result {i}") for i in range(8)]
    kept = filter_results(results)
    assert [r.title for r in kept] == [f"Result {i}" for i in range(5)]


def test_format_results():
    text = format_results([trusted_result()], summary="Call if the fever is over 104F.")
    assert text == (
        "**Latest Information:**\nCall if the fever is over 104F.\n\n"
        "**Recent Research & Expert Sources:**\n"
        "1. **Fever in Children** (healthychildren.org)\n"
        "   When to call the pediatrician about a fever."
    )
    assert format_results([], None) == ""


def test_augment_uses_filtered_results():
    client = FakeSearchClient(results=[trusted_result()])
    analysis = classifier.classify("My toddler has a high fever")
    augmentation = SearchAugmenter(client).augment("My toddler has a high fever", analysis)

    assert augmentation.used
    assert "Fever in Children" in augmentation.text
    assert client.queries[0].startswith("My toddler has a high fever toddler")


@pytest.mark.parametrize("error", [
    SearchClientError("HTTP 500"),
    SearchPayloadError("bad json"),
    ConnectionResetError("connection reset by peer"),
    ValueError("unexpected"),
])
def test_augment_absorbs_search_failures(error):
    client = FakeSearchClient(error=error)
    analysis = classifier.classify("My toddler has a high fever")
    augmentation = SearchAugmenter(client).augment("My toddler has a high fever", analysis)

    assert not augmentation.used
    assert augmentation.text == ""


def test_augment_without_kept_results_is_unused():
    client = FakeSearchClient(
        results=[SearchResult(title="Deal", link="https://shop.example.com", snippet="discount diapers")],
        summary="Some summary",
    )
    analysis = classifier.classify("diapers")
    augmentation = SearchAugmenter(client).augment("diapers", analysis)

    assert not augmentation.used
    assert augmentation.summary == "Some summary"
    assert augmentation.text == ""


def test_unconfigured_augmenter():
    augmenter = SearchAugmenter(None)
    assert not augmenter.is_configured
    assert not augmenter.augment("question", classifier.classify("question")).used

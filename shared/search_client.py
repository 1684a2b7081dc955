"""
Web search HTTP client for the Serper Google Search API (standard-library HTTP).

This module provides a tiny client that calls the Serper search endpoint using only
Python's standard library. It issues an HTTP POST with a JSON body and returns the
organic results plus an optional short summary (answer box or knowledge graph text).
The client enforces a configurable timeout so a slow search backend can never stall
answer generation, and it keeps a clear error taxonomy so callers can tell timeouts
apart from non-200 responses and malformed payloads.

Before sending, queries are enriched with parenting context: generic queries get
family/pediatric terms, queries that already mention children get freshness and
guideline terms. The client itself never filters results; trust and spam filtering
is the search augmenter's job.
"""

from __future__ import annotations

import http.client
import json
import os
import socket
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
from urllib import error as urlerror
from urllib import request as urlrequest

from monitoring.metrics import SEARCH_REQUEST_TIME, track_latency
from shared.errors import CollaboratorTimeoutError, MalformedBackendPayload, TransientNetworkFailure
from shared.models import SearchResponse, SearchResult

DEFAULT_SEARCH_URL = "https://google.serper.dev/search"

PARENTING_CONTEXT_KEYWORDS = [
    'parenting', 'child development', 'pediatric', 'family', 'children',
    'toddler', 'baby', 'infant', 'preschooler', 'kids',
]


class SearchClientError(TransientNetworkFailure):
    """
    Base exception for search client errors.

    Raised for non-timeout failures such as non-200 HTTP responses or network errors.
    """


class SearchClientTimeoutError(SearchClientError, CollaboratorTimeoutError):
    """Raised when the search request exceeds the configured timeout."""


class SearchPayloadError(SearchClientError, MalformedBackendPayload):
    """Raised when the search backend returns invalid JSON or an unexpected shape."""


def _append_missing(query: str, terms: str) -> str:
    # Whole words, case-insensitive.
    present = set(query.lower().split())
    missing = [term for term in terms.split() if term.lower() not in present]
    return " ".join([query] + missing) if missing else query


def enhance_parenting_query(query: str, today: Optional[date] = None) -> str:
    """
    Add parenting context to a search query so results lean toward family sources.

    Terms the query already contains are not repeated.

    Args:
        query (str): Query text, usually already optimized by the search augmenter.
        today (Optional[date]): Reference date for the freshness terms; defaults to today.

    Returns:
        str: The enriched query string.
    """
    lower_query = query.lower()
    if not any(keyword in lower_query for keyword in PARENTING_CONTEXT_KEYWORDS):
        return _append_missing(query, "parenting children family pediatric advice")

    year = (today or date.today()).year
    return _append_missing(query, f"{year} {year + 1} pediatric guidelines expert advice")


def parse_search_payload(payload: Any) -> SearchResponse:
    """
    Convert a Serper JSON payload into a SearchResponse.

    Entries without a link are skipped. Missing optional fields become empty strings
    so downstream filtering never has to guard against None.

    Raises:
        SearchPayloadError: If the payload is not an object or `organic` is not a list.
    """
    if not isinstance(payload, dict):
        raise SearchPayloadError(f"Expected JSON object from search API, got {type(payload).__name__}")

    organic = payload.get("organic", [])
    if not isinstance(organic, list):
        raise SearchPayloadError("Search API field 'organic' is not a list")

    results: List[SearchResult] = []
    for item in organic:
        if not isinstance(item, dict) or not item.get("link"):
            continue
        results.append(SearchResult(
            title=str(item.get("title") or ""),
            link=str(item["link"]),
            snippet=str(item.get("snippet") or ""),
            date=item.get("date"),
        ))

    summary = None
    answer_box = payload.get("answerBox")
    knowledge_graph = payload.get("knowledgeGraph")
    if isinstance(answer_box, dict) and answer_box.get("answer"):
        summary = str(answer_box["answer"])
    elif isinstance(knowledge_graph, dict) and knowledge_graph.get("description"):
        summary = str(knowledge_graph["description"])

    return SearchResponse(results=results, summary=summary)


class SerperSearchClient:
    """
    Search collaborator backed by the Serper API.

    Instances are only created when an API key is configured; a missing key means the
    orchestrator simply has no search client and skips augmentation.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_SEARCH_URL,
        timeout_s: float = 5.0,
        num_results: int = 8,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url
        self.timeout_s = float(timeout_s)
        self.num_results = int(num_results)

    @track_latency(SEARCH_REQUEST_TIME)
    def search(self, query: str) -> SearchResponse:
        """
        POST a query to Serper and return the parsed organic results.

        Safe search is always on because the audience is families.

        Args:
            query (str): The search query; parenting context is added before sending.

        Returns:
            SearchResponse: Organic results in ranking order plus an optional summary.

        Raises:
            SearchClientTimeoutError: When the request exceeds the configured timeout.
            SearchClientError: For non-200 HTTP responses or network failures.
            SearchPayloadError: For invalid JSON or an unexpected payload shape.
        """
        body: Dict[str, Any] = {
            "q": enhance_parenting_query(query),
            "num": self.num_results,
            "hl": "en",
            "gl": "us",
            "safe": "active",
        }
        data = json.dumps(body).encode("utf-8")

        req = urlrequest.Request(self.base_url, data=data, method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("X-API-KEY", self._api_key)

        try:
            with urlrequest.urlopen(req, timeout=self.timeout_s) as resp:
                status = getattr(resp, "status", 200)
                text = resp.read().decode("utf-8", errors="replace")
        except socket.timeout as exc:
            raise SearchClientTimeoutError(f"Search request timed out after {self.timeout_s}s") from exc
        except urlerror.HTTPError as exc:
            raise SearchClientError(f"Search API HTTP {exc.code}") from exc
        except urlerror.URLError as exc:
            # URLError may wrap socket.timeout or other transient network errors
            if isinstance(exc.reason, socket.timeout):
                raise SearchClientTimeoutError(f"Search request timed out after {self.timeout_s}s") from exc
            raise SearchClientError(f"Network error calling search API: {exc}") from exc
        except (OSError, http.client.HTTPException) as exc:
            # Dropped or reset connections surface here, outside urllib's own errors
            raise SearchClientError(f"Connection to search API failed: {exc!r}") from exc

        if status != 200:
            raise SearchClientError(f"Search API HTTP {status}: {text[:200]}")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SearchPayloadError(f"Invalid JSON from search API: {exc}: body={text[:200]}") from exc

        return parse_search_payload(payload)


def build_search_client(config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Optional[SerperSearchClient]:
    """
    Build the search client from the `search` configuration section, or None without a key.

    Args:
        config (Dict[str, Any]): The full application CONFIG mapping.
        environ (Optional[Mapping[str, str]]): Environment mapping; defaults to os.environ.

    Returns:
        Optional[SerperSearchClient]: A ready client, or None when SERPER_API_KEY (or the
        configured variable) is missing.
    """
    search_cfg = config.get("search", {}) or {}
    env = os.environ if environ is None else environ
    api_key = (env.get(search_cfg.get("api_key_env", "SERPER_API_KEY"), "") or "").strip()
    if not api_key:
        return None
    return SerperSearchClient(
        api_key=api_key,
        base_url=search_cfg.get("endpoint", DEFAULT_SEARCH_URL),
        timeout_s=float(search_cfg.get("timeout_s", 5.0)),
        num_results=int(search_cfg.get("num_results", 8)),
    )

"""
shared/utils.py

Shared utility functions used across multiple modules.

This module contains small helpers used by the search augmenter, the orchestrator
and the API layer to avoid code duplication and keep log output consistent.
"""

import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def truncate_message_for_logging(message: str, max_length: int = 100) -> str:
    """
    Truncate long messages for logging purposes.

    Args:
        message (str): Message to truncate
        max_length (int): Maximum length before truncation (default: 100)

    Returns:
        str: Truncated message with ellipsis if needed

    Used for logging to avoid extremely long log entries while preserving
    the beginning of the message for debugging purposes.
    """
    if len(message) <= max_length:
        return message
    return message[:max_length] + "..."


def extract_hostname(link: str) -> str:
    """
    Return the lower-cased host name of a URL, or an empty string if it cannot be parsed.

    Search results come from a third party and occasionally carry relative or broken
    links. Callers treat an empty host as "unknown source" rather than failing.

    Args:
        link (str): Absolute URL such as "https://www.healthychildren.org/English/...".

    Returns:
        str: Host name such as "www.healthychildren.org", or "" for unparsable input.
    """
    try:
        return (urlparse(link).hostname or "").lower()
    except (ValueError, AttributeError):
        logger.debug("Could not parse link %r", link)
        return ""


def display_domain(link: str) -> str:
    """Host name without a leading "www." for compact source attributions."""
    host = extract_hostname(link)
    return host[4:] if host.startswith("www.") else host

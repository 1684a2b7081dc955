"""
Monitoring package initializer.

This package exposes Prometheus metrics and helper decorators for tracking
pipeline latency, provider and search latency, and fallback activity.
"""

from .metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    ERROR_COUNT,
    PIPELINE_PROCESSING_TIME,
    FALLBACK_COUNT,
    LLM_REQUEST_TIME,
    SEARCH_REQUEST_TIME,
    track_latency,
    track_errors,
)

__all__ = [
    'REQUEST_COUNT',
    'REQUEST_LATENCY',
    'ERROR_COUNT',
    'PIPELINE_PROCESSING_TIME',
    'FALLBACK_COUNT',
    'LLM_REQUEST_TIME',
    'SEARCH_REQUEST_TIME',
    'track_latency',
    'track_errors',
]

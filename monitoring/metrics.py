"""
Core metrics and monitoring decorators for the parenting assistant.

This module defines Prometheus metrics and decorators for tracking:
- Request latency and counts
- Error rates
- Pipeline processing time
- External API latency (LLM providers and web search)
- Fallback steps taken when a collaborator fails
"""

import time
import functools
import logging
from typing import Optional, Callable
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")]
)

# Error metrics
ERROR_COUNT = Counter(
    'error_total',
    'Total number of errors',
    ['type', 'location']  # type: e.g., 'http', 'pipeline', 'provider'; location: specific component
)

# Pipeline metrics
PIPELINE_PROCESSING_TIME = Histogram(
    'pipeline_processing_duration_seconds',
    'Time spent processing in pipeline',
    ['pipeline_name'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")]
)

FALLBACK_COUNT = Counter(
    'fallback_steps_total',
    'Number of generation fallback steps that failed and were skipped',
    ['step', 'error_type']
)

# External API metrics
LLM_REQUEST_TIME = Histogram(
    'llm_request_duration_seconds',
    'Time spent waiting for LLM API',
    ['provider'],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, float("inf")]
)

SEARCH_REQUEST_TIME = Histogram(
    'search_request_duration_seconds',
    'Time spent waiting for the web search API',
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, float("inf")]
)

def track_latency(metric: Histogram, labels: Optional[Callable] = None) -> Callable:
    """
    A decorator factory that tracks the execution time of a function using a Prometheus Histogram.

    Args:
        metric (Histogram): The Prometheus Histogram to record the timing in
        labels (Callable, optional): Function that receives the first positional argument
            (``self`` for methods) and returns the metric labels dictionary

    Returns:
        Callable: The decorated function
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                duration = time.time() - start_time
                if labels and args:
                    metric.labels(**labels(args[0])).observe(duration)
                else:
                    metric.observe(duration)

                logger.debug(
                    f"Function {func.__name__} execution time: {duration:.2f} seconds",
                    extra={'duration': duration, 'function': func.__name__}
                )
        return wrapper
    return decorator

def track_errors(error_type: str, location: str) -> Callable:
    """
    A decorator factory that tracks errors occurring in a function.

    Args:
        error_type (str): Type of error (e.g., 'http', 'pipeline', 'provider')
        location (str): Where the error occurred

    Returns:
        Callable: The decorated function

    Example:
        @track_errors('http', 'prompt')
        def handle_prompt(request):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                ERROR_COUNT.labels(
                    type=error_type,
                    location=location
                ).inc()

                logger.error(
                    f"Error in {location} ({error_type}): {str(e)}",
                    extra={
                        'error_type': error_type,
                        'location': location,
                        'error': str(e)
                    },
                    exc_info=True
                )
                raise  # Re-raise the exception after tracking
        return wrapper
    return decorator

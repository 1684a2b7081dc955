"""
core/fallback.py

Ordered fallback chain for answer generation.

Generation strategies are modeled as data: a list of steps, each with a name, an
availability check and an attempt. The chain walks the steps in order, skipping the
unavailable ones, and returns the first successful result. A step that raises one of
the recoverable collaborator errors is recorded as a failure (step name plus error
type), logged and counted, and the next step is tried. Anything else propagates.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from monitoring.metrics import FALLBACK_COUNT
from shared.errors import AssistantError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FallbackStep(Generic[T]):
    name: str
    is_available: Callable[[], bool]
    attempt: Callable[[], T]


@dataclass(frozen=True)
class StepFailure:
    step: str
    error_type: str


@dataclass
class FallbackOutcome(Generic[T]):
    """Result of the first successful step plus the failures recorded on the way."""
    step: str
    result: T
    failures: List[StepFailure] = field(default_factory=list)

    def failed(self, step: str) -> bool:
        return any(failure.step == step for failure in self.failures)


class FallbackExhausted(AssistantError):
    """No step of the chain was available or every available step failed."""

    def __init__(self, failures: Sequence[StepFailure]):
        super().__init__(f"All fallback steps failed: {[(f.step, f.error_type) for f in failures]}")
        self.failures = list(failures)


def run_fallback_chain(
    steps: Sequence[FallbackStep[T]],
    log: Optional[logging.LoggerAdapter] = None,
    recoverable: Tuple[type, ...] = (AssistantError,),
) -> FallbackOutcome[T]:
    """
    Run the steps in order and return the first successful outcome.

    Args:
        steps: The ordered strategies.
        log: Logger (or adapter carrying request context) for the audit lines.
        recoverable: Exception types that move the chain to the next step.

    Raises:
        FallbackExhausted: If no step produced a result.
    """
    log = log or logger
    failures: List[StepFailure] = []
    for step in steps:
        if not step.is_available():
            log.debug("Fallback step %s unavailable, skipping", step.name, extra={'step': step.name})
            continue
        try:
            result = step.attempt()
        except recoverable as e:
            error_type = type(e).__name__
            failures.append(StepFailure(step=step.name, error_type=error_type))
            FALLBACK_COUNT.labels(step=step.name, error_type=error_type).inc()
            log.warning(
                "Fallback step %s failed: %s", step.name, e,
                extra={'step': step.name, 'error_type': error_type},
            )
            continue
        return FallbackOutcome(step=step.name, result=result, failures=failures)

    raise FallbackExhausted(failures)

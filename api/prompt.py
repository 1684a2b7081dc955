"""
api/prompt.py (PROMPT, RESET, CLASSIFY and PROVIDERS endpoints)

Handles the conversational endpoints of the parenting assistant. Prompt and reset
live in one file because reset clears the session memory the prompt endpoint reads.
Classify and providers are small read-only helpers the UI uses for badges and the
settings panel.

Endpoints:
  - POST /prompt: Answers a parent's question through the orchestration pipeline and
                  returns the AI response plus a voice/video recommendation.
  - POST /reset: Clears the session memory of one conversation.
  - GET /classify: Returns category, urgency, child age and the full analysis of a question.
  - GET /providers: Lists the providers with credentials and whether web search is on.

All handlers are plain functions, so FastAPI runs the synchronous pipeline in its
threadpool and concurrent requests do not block each other.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.classifier import categorize, determine_urgency, extract_child_age
from core.orchestrator import ParentingOrchestrator
from core.provider_selector import available_provider_names, is_configured
from monitoring.metrics import REQUEST_COUNT, REQUEST_LATENCY, track_errors
from shared.models import CallerContext, PromptRequest, PromptResponse
from shared.utils import truncate_message_for_logging

from .dependencies import get_orchestrator

# Get a logger instance for this module
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/prompt", response_model=PromptResponse)
@track_errors('http', 'prompt')
def handle_prompt(request: PromptRequest, orchestrator: ParentingOrchestrator = Depends(get_orchestrator)):
    """
    Answer a parent's question.

    The pipeline never raises for collaborator failures: a missing or failing provider
    or search backend only lowers the confidence and switches to an offline answer, so
    this endpoint returns HTTP 200 with a complete AIResponse in those cases too.

    Args:
        request (PromptRequest): The message plus session id and optional child age and
            urgency hints from the UI.

    Returns:
        PromptResponse: The AI response fields plus the `media` recommendation.
    """
    start_time = time.time()
    logger.info(
        "[handle_prompt] Session %s - Message: '%s'",
        request.session_id, truncate_message_for_logging(request.message, 80),
    )

    caller_context = CallerContext(
        session_id=request.session_id,
        child_age=request.child_age,
        urgency=request.urgency,
    )
    try:
        response = orchestrator.generate_prompt_response(request.message, caller_context)
    except Exception:
        REQUEST_COUNT.labels(method='POST', endpoint='/api/prompt', status='500').inc()
        raise
    finally:
        REQUEST_LATENCY.labels(method='POST', endpoint='/api/prompt').observe(time.time() - start_time)

    REQUEST_COUNT.labels(method='POST', endpoint='/api/prompt', status='200').inc()
    logger.info(
        "[handle_prompt] Session %s answered: category=%s provider=%s confidence=%.2f",
        request.session_id, response.category, response.provider or 'offline', response.confidence,
    )
    return response


@router.post("/reset")
def reset_conversation(session_id: str = "default",
                       orchestrator: ParentingOrchestrator = Depends(get_orchestrator)):
    """
    Clear the session memory of one conversation.

    Resetting a session that has no memory yet is a no-op and still succeeds, so the UI
    can call this unconditionally when the parent starts a new chat.

    Args:
        session_id (str): The conversation to reset.

    Returns:
        JSONResponse: {'response': True, 'message': ...}.
    """
    logger.info(f"[reset_conversation] Received request to reset session: {session_id}")
    cleared = orchestrator.context.memory.clear(session_id)
    message = "Conversation memory cleared" if cleared else "No conversation memory for this session"
    return JSONResponse({"response": True, "message": message})


@router.get("/classify")
def classify_question(question: str, orchestrator: ParentingOrchestrator = Depends(get_orchestrator)):
    """Category, urgency and child age of a question, plus the full analysis."""
    analysis = orchestrator.classify(question)
    return {
        "category": categorize(question),
        "urgency": determine_urgency(question).value,
        "childAge": extract_child_age(question),
        "analysis": analysis.to_dict(),
    }


@router.get("/providers")
def list_providers(orchestrator: ParentingOrchestrator = Depends(get_orchestrator)):
    """Names of the providers with credentials (highest priority first) and the search status."""
    providers = orchestrator.context.providers
    return {
        "configured": is_configured(providers),
        "providers": available_provider_names(providers),
        "webSearch": orchestrator.augmenter.is_configured,
        "video": orchestrator.context.video_configured,
    }

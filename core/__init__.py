"""
core/__init__.py

Core orchestration modules.

This package contains the decision logic of the parenting assistant:
- classifier: Rule-based question classification (type, category, urgency, child age)
- provider_selector: Provider selection policy
- prompt_composer: System/user prompt construction
- sanitizer: Cleanup of raw provider output
- confidence: Confidence score and reasoning audit trail
- fallback: Ordered generation fallback chain
- media: Voice/video recommendation for answers
- context: Dependency bundle handed to the pipeline
- orchestrator: Main pipeline coordination

These modules handle the high-level flow of a question through the system.
"""

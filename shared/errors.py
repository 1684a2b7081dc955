"""
shared/errors.py

Error taxonomy for the external collaborators of the orchestration engine.

None of these exceptions ever reaches a caller of the pipeline. They exist so the
clients can report what went wrong precisely and the orchestrator can log and count
the failure before moving on to the next fallback step. A missing credential is not
an error at all: it is represented as a capability flag on the configuration.
"""


class AssistantError(Exception):
    """Base class for recoverable collaborator failures."""


class TransientNetworkFailure(AssistantError):
    """
    A networked collaborator could not be reached or answered with a non-success status.

    Recovered locally by falling back to the next strategy.
    """


class CollaboratorTimeoutError(TransientNetworkFailure):
    """The call exceeded its configured timeout."""


class MalformedBackendPayload(AssistantError):
    """
    A collaborator answered, but the payload did not have the expected shape.

    Treated exactly like a transient network failure.
    """

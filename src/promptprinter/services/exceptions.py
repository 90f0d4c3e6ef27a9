"""Custom exceptions for Prompt Printer services.

Every failure the workflow can hit maps to one of these classes. The
workflow controller catches them at the operation boundary and turns them
into a transient notice; none of them is fatal to the process.
"""


class PromptPrinterError(Exception):
    """Base class for all workflow errors.

    Attributes:
        message: Human-readable error message (shown to the user)
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(PromptPrinterError):
    """Raised when the draft is missing a title or content before analysis.

    No backend call is made when this is raised.
    """


class ConnectivityError(PromptPrinterError):
    """Raised when a storage or AI backend connection probe fails.

    Attributes:
        component: Which collaborator failed the probe ("storage" or "ai")
    """

    def __init__(self, component: str, message: str | None = None):
        self.component = component
        super().__init__(message or f"{component} is not reachable")


class AnalysisFailed(PromptPrinterError):
    """Raised when an analysis call fails for any reason.

    Covers network errors, non-success HTTP statuses and responses that are
    not the expected JSON object. Backend-specific exceptions are chained
    as ``__cause__``.

    Attributes:
        backend: Backend identifier that produced the failure
        status_code: HTTP status code, when the failure was an HTTP error
    """

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        status_code: int | None = None,
    ):
        self.backend = backend
        self.status_code = status_code
        super().__init__(message)


class PersistenceFailed(PromptPrinterError):
    """Raised when a storage create/update/delete/list operation fails.

    Attributes:
        operation: Storage operation name (e.g. "create_prompt")
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(message)

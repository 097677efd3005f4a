"""Error taxonomy for the chat endpoint."""

SERVICE_UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again later."


class InvalidRequestError(ValueError):
    """The request body is malformed; the caller has to fix and resubmit it."""


class BackendUnavailableError(RuntimeError):
    """A model, embedder or vector store failed while serving a request.

    The message is always the generic user-facing text; the original error is
    chained as ``__cause__`` for server-side logging only.
    """

    def __init__(self, message: str = SERVICE_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)

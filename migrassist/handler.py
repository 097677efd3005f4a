"""Request handling for ``POST /chat/stream``."""

import json
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from .backends import Backend, BackendFactory
from .config import config
from .errors import BackendUnavailableError, InvalidRequestError
from .pipeline import RAGPipeline
from .schemas import ChatRequest
from .streaming import prime, to_ndjson

logger = config.get_logger(__name__)

INVALID_MESSAGES = "Invalid or missing messages in the request body"


class ChatHandler:
    """Validates a chat request and turns it into an ndjson answer stream."""

    def __init__(self, factory: BackendFactory | None = None) -> None:
        self.factory = factory or BackendFactory()

    @staticmethod
    def parse(body: bytes | str | dict[str, Any]) -> ChatRequest:
        """Parse and validate a request body.

        Raises:
            InvalidRequestError: If the body is not JSON, has no messages or
                the last message is empty.
        """  # noqa: DOC201
        try:
            payload = json.loads(body) if isinstance(body, (bytes, str)) else body
            return ChatRequest.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            logger.info("Rejected chat request: %s", exc)
            raise InvalidRequestError(INVALID_MESSAGES) from exc

    def handle(self, body: bytes | str | dict[str, Any]) -> Iterator[str]:
        """Run the RAG flow and return the ndjson lines of the answer.

        Everything up to and including the first answer fragment runs before
        this returns, so failures there are reported as
        ``BackendUnavailableError`` instead of a truncated stream.

        Raises:
            InvalidRequestError: Before any backend is touched.
            BackendUnavailableError: If backend setup, retrieval or the start
                of generation fails.
        """  # noqa: DOC201
        request = self.parse(body)

        backend = None
        try:
            backend = self.factory.create()
            fragments = RAGPipeline(backend).stream(request.question)
            lines = prime(to_ndjson(fragments))
        except Exception as exc:
            logger.exception("Error when processing chat-post request: %s", exc)  # noqa: TRY401
            if backend is not None:
                self.factory.release(backend)
            raise BackendUnavailableError from exc

        return self._relay(lines, fragments, backend)

    def _relay(
        self, lines: Iterator[str], fragments: Iterator[str], backend: Backend
    ) -> Iterator[str]:
        try:
            yield from lines
        except Exception as exc:
            # Bytes already went out; the client sees the stream end early.
            logger.exception("Chat stream failed after it started: %s", exc)  # noqa: TRY401
        finally:
            close = getattr(fragments, "close", None)
            if callable(close):
                close()
            self.factory.release(backend)

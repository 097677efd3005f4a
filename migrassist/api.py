"""FastAPI application exposing the streaming chat endpoint."""

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, StreamingResponse

from .config import config
from .errors import BackendUnavailableError, InvalidRequestError
from .handler import ChatHandler
from .streaming import NDJSON_MEDIA_TYPE

logger = config.get_logger(__name__)


def create_app(handler: ChatHandler | None = None) -> FastAPI:
    """Build the API around ``handler`` (a default one if not given)."""  # noqa: DOC201
    config.setup_logging()
    chat_handler = handler or ChatHandler()

    app = FastAPI(
        title="Migration Assistant Chat API",
        description="Retrieval-augmented chat for people planning a migration",
    )
    app.state.chat_handler = chat_handler

    @app.exception_handler(InvalidRequestError)
    async def invalid_request(_: Request, exc: InvalidRequestError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(BackendUnavailableError)
    async def backend_unavailable(
        _: Request, exc: BackendUnavailableError
    ) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=503)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "backend": chat_handler.factory.kind}

    @app.post("/chat/stream")
    async def chat_stream(request: Request) -> StreamingResponse:
        """Answer the last message of a conversation as an ndjson stream."""
        body = await request.body()
        lines = await run_in_threadpool(chat_handler.handle, body)
        return StreamingResponse(
            lines,
            media_type=NDJSON_MEDIA_TYPE,
            headers={"Transfer-Encoding": "chunked"},
        )

    return app


app = create_app()

"""HTTP client for the chat stream endpoint, used by the Streamlit UI."""

import json
import re
from collections.abc import Iterable, Iterator

import httpx

from .config import config

logger = config.get_logger(__name__)

FOLLOW_UP_PATTERN = re.compile(r"<<([^>]+)>>")


def iter_deltas(lines: Iterable[str]) -> Iterator[str]:
    """Yield the ``delta.content`` of each ndjson line.

    Raises:
        ValueError: If a line is not a JSON response chunk.
    """
    for line in lines:
        if not line.strip():
            continue
        data = json.loads(line)
        try:
            yield data["delta"]["content"]
        except (KeyError, TypeError) as exc:
            msg = f"Malformed chat stream line: {line!r}"
            raise ValueError(msg) from exc


def split_follow_up_questions(answer: str) -> tuple[str, list[str]]:
    """Separate the ``<<question>>`` suggestions from the answer text.

    Returns:
        The answer without the markers and the questions in order.
    """
    questions = [q.strip() for q in FOLLOW_UP_PATTERN.findall(answer)]
    text = FOLLOW_UP_PATTERN.sub("", answer).strip()
    return text, questions


class ChatClient:
    """Talks to ``POST /chat/stream``."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 120.0,
    ) -> None:
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.client = client or httpx.Client(
            timeout=timeout, headers=config.get_api_headers()
        )

    def stream_answer(self, messages: list[dict[str, str]]) -> Iterator[str]:
        """Yield answer fragments as the server sends them.

        Raises:
            RuntimeError: If the server does not answer with 200.
        """
        url = f"{self.base_url}/chat/stream"
        with self.client.stream("POST", url, json={"messages": messages}) as response:
            if response.status_code != httpx.codes.OK:
                response.read()
                msg = f"Backend returned status {response.status_code}: {response.text}"
                raise RuntimeError(msg)
            yield from iter_deltas(response.iter_lines())

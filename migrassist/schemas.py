"""Request and response models for the chat stream endpoint."""

from typing import Literal

from pydantic import BaseModel, field_validator


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = ""


class ChatRequest(BaseModel):
    """A conversation, oldest message first."""

    messages: list[ChatMessage]

    @field_validator("messages")
    @classmethod
    def _last_message_has_content(cls, value: list[ChatMessage]) -> list[ChatMessage]:
        if not value:
            raise ValueError("messages must not be empty")
        if not value[-1].content:
            raise ValueError("last message content must not be empty")
        return value

    @property
    def question(self) -> str:
        """Content of the latest message, used as the retrieval query."""
        return self.messages[-1].content


class ResponseDelta(BaseModel):
    content: str
    role: Literal["assistant"] = "assistant"


class ResponseChunk(BaseModel):
    """One increment of the generated answer on the wire."""

    delta: ResponseDelta

    @classmethod
    def from_fragment(cls, fragment: str) -> "ResponseChunk":
        return cls(delta=ResponseDelta(content=fragment))

    def to_ndjson(self) -> str:
        """Serialise as a single newline-terminated JSON line."""
        return self.model_dump_json() + "\n"

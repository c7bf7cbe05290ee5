"""Stream event models - the NDJSON wire contract of the ask endpoint.

Exactly five shapes are valid. Each is a pydantic model with a literal
``type`` tag, and ``StreamEvent`` is the discriminated union of them, so a
line can be validated back into the right class with ``parse_event``.
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class StatusEvent(BaseModel):
    """Progress notice, e.g. a tool being queried."""

    type: Literal["status"] = "status"
    text: str


class TextEvent(BaseModel):
    """Incremental answer text."""

    type: Literal["text"] = "text"
    delta: str


class ClearPartialEvent(BaseModel):
    """Retracts the text streamed so far in the current model turn."""

    type: Literal["clear_partial"] = "clear_partial"


class DoneEvent(BaseModel):
    """Terminal event of a completed exchange."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["done"] = "done"
    conversation_id: str = Field(alias="conversationId")


class ErrorEvent(BaseModel):
    """Terminal event of a failed exchange."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    Union[StatusEvent, TextEvent, ClearPartialEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

TERMINAL_EVENTS = (DoneEvent, ErrorEvent)

_event_adapter = TypeAdapter(StreamEvent)


def is_terminal(event: StreamEvent) -> bool:
    """Whether the event ends the stream."""
    return isinstance(event, TERMINAL_EVENTS)


def encode_event(event: StreamEvent) -> str:
    """Serialize one event as a single NDJSON line (with trailing newline)."""
    return event.model_dump_json(by_alias=True) + "\n"


def parse_event(line: str) -> StreamEvent:
    """Parse one NDJSON line back into its event model."""
    return _event_adapter.validate_json(line)

"""Stream Emitter - relays agent events as NDJSON lines."""

from typing import AsyncIterator

from ..models.events import StreamEvent, encode_event, is_terminal
from ..utils.logger import get_app_logger


NDJSON_MEDIA_TYPE = "application/x-ndjson"


class StreamEmitter:
    """
    Encodes each event as one JSON line, in the order received.

    No batching, reordering or coalescing. Relaying stops after the first
    done or error event, so a stream never carries two terminal events.
    """

    def __init__(self):
        self.logger = get_app_logger()
        self.emitted = 0

    async def relay(self, events: AsyncIterator[StreamEvent]) -> AsyncIterator[bytes]:
        """
        Encode events for the transport.

        Args:
            events: Event source, normally AskService.stream

        Yields:
            One UTF-8 encoded NDJSON line per event
        """
        try:
            async for event in events:
                self.emitted += 1
                yield encode_event(event).encode("utf-8")
                if is_terminal(event):
                    self.logger.debug(f"Stream closed with {event.type} after {self.emitted} events")
                    break
        finally:
            # release the source even when stopping early
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

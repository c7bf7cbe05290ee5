"""Ask API routes - V1."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ..deps import require_operator
from ...agent.emitter import StreamEmitter, NDJSON_MEDIA_TYPE
from ...models.chat import AskRequest, AskResult
from ...services.ask_service import AskService

router = APIRouter(
    prefix="/api/v1/ask",
    tags=["Ask"],
    dependencies=[Depends(require_operator)]
)

# Ask service (set by main.py)
ask_service: AskService = None


def get_ask_service() -> AskService:
    """Dependency to get the ask service."""
    if ask_service is None:
        raise HTTPException(status_code=500, detail="Ask service not initialized")
    return ask_service


@router.post("/stream")
async def ask_stream(
    request: AskRequest,
    service: AskService = Depends(get_ask_service)
):
    """Answer a question as a stream of NDJSON events."""
    emitter = StreamEmitter()
    return StreamingResponse(
        emitter.relay(service.stream(request)),
        media_type=NDJSON_MEDIA_TYPE,
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        }
    )


@router.post("", response_model=AskResult, response_model_exclude_none=True)
async def ask(
    request: AskRequest,
    service: AskService = Depends(get_ask_service)
):
    """Answer a question and return the final reply in one response."""
    return await service.ask(request)

"""Streaming chat endpoint.

Streams model replies as Server-Sent Events, one ``StreamChunk`` per frame.
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from src.agent.chat_agent import AgentService, get_agent_service
from src.models.schemas import ChatRequest, StreamChunk, StreamStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

# Details stay in the server log; clients only learn that the model failed.
STREAM_ERROR_MESSAGE = "Model request failed"


def _sse(chunk: StreamChunk) -> str:
    """Format a chunk as one SSE data frame."""
    return f"data: {chunk.model_dump_json()}\n\n"


async def _event_stream(
    service: AgentService,
    message: str,
    session_id: str,
) -> AsyncGenerator[str]:
    """Yield SSE frames for one reply.

    Always ends with a ``done`` frame, either complete or error.
    """
    yield _sse(StreamChunk(content="", done=False, status=StreamStatus.RECEIVED))

    try:
        async for content in service.stream_response(message, session_id):
            yield _sse(
                StreamChunk(content=content, done=False, status=StreamStatus.GENERATING)
            )
    except Exception as e:
        logger.error(f"Streaming failed for session {session_id}: {e}")
        yield _sse(
            StreamChunk(
                content="",
                done=True,
                status=StreamStatus.ERROR,
                error=STREAM_ERROR_MESSAGE,
            )
        )
        return

    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))


@router.post("/stream")
async def stream_chat(
    request: ChatRequest,
    service: AgentService = Depends(get_agent_service),
) -> StreamingResponse:
    """Stream a chat reply as Server-Sent Events.

    Args:
        request: User message and optional session id. A session id is
            generated when omitted.

    Returns:
        ``text/event-stream`` response; the session id is echoed in the
        ``X-Session-ID`` header.
    """
    session_id = request.session_id or str(uuid.uuid4())
    logger.info(f"Streaming reply for session {session_id}")

    return StreamingResponse(
        _event_stream(service, request.message, session_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Session-ID": session_id,
        },
    )

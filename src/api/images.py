"""Image generation endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.agent.chat_agent import AgentService, get_agent_service
from src.models.schemas import ImageRequest, ImageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.post("/generate", response_model=ImageResponse)
async def generate_image(
    request: ImageRequest,
    service: AgentService = Depends(get_agent_service),
) -> ImageResponse:
    """Generate one image for a prompt.

    An empty result is not an error: ``image`` is null and the client decides
    how to present it.

    Raises:
        502: The upstream model failed.
    """
    try:
        image = await service.generate_image(request.prompt)
    except Exception as e:
        logger.error(f"Image generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Image generation failed",
        ) from e

    return ImageResponse(prompt=request.prompt, image=image)

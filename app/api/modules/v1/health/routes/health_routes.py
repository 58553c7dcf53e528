from fastapi import APIRouter, Response, status
from fastapi.responses import PlainTextResponse

from app.api.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/", response_class=PlainTextResponse)
async def index():
    return PlainTextResponse(settings.GREETING)


@router.get("/health_check", response_class=Response)
async def health_check():
    """Liveness probe: always 200 with an empty body."""
    return Response(status_code=status.HTTP_200_OK)

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.exceptions import PersistenceError
from app.api.db.database import get_db
from app.api.modules.v1.subscriptions.schemas.subscription_schema import SubscribeForm
from app.api.modules.v1.subscriptions.service.subscription_service import (
    SubscriptionService,
)

router = APIRouter(tags=["Subscriptions"])

logger = logging.getLogger("app")


async def require_urlencoded_form(request: Request) -> None:
    """Reject multipart uploads; only URL-encoded forms are accepted."""
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() == "multipart/form-data":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Form body must be application/x-www-form-urlencoded",
        )


@router.post(
    "/subscriptions",
    dependencies=[Depends(require_urlencoded_form)],
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        400: {"description": "`name` or `email` missing, or the body is not URL-encoded"},
        500: {"description": "The subscription could not be stored"},
    },
)
async def subscribe(
    form: Annotated[SubscribeForm, Form()],
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Add a new subscriber.

    Accepts an ``application/x-www-form-urlencoded`` body with ``name`` and
    ``email``. Requests missing either field never reach this function; the
    validation handler answers them with 400.

    Returns:
    - 200: Subscription stored (empty body)
    - 400: Missing or undecodable form fields, or a multipart body
    - 500: Database failure (empty body, cause only logged)
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info(
        "Adding a new subscriber request_id=%s subscriber_email=%s subscriber_name=%s",
        request_id,
        form.email,
        form.name,
    )

    try:
        await SubscriptionService(db).subscribe(form)
    except PersistenceError as e:
        logger.error(
            "Failed to add subscriber request_id=%s subscriber_email=%s: %s",
            request_id,
            form.email,
            e.__cause__ or e,
            exc_info=e.__cause__ or e,
        )
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info("Subscriber added request_id=%s", request_id)
    return Response(status_code=status.HTTP_200_OK)

"""API router aggregation.

All resource endpoints are prefixed with `/api`.
"""

from fastapi import APIRouter

from onesignal_gateway.api import emails, journeys, notifications

router = APIRouter(
    prefix="/api",
    responses={
        400: {"description": "Invalid request"},
        500: {"description": "Provider or internal error"},
    },
)

router.include_router(notifications.router)
router.include_router(emails.router)
router.include_router(journeys.router)

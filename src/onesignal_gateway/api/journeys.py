"""Journey endpoints: user creation, segment tagging and connectivity diagnostics."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from onesignal_gateway.api.health import subsystem_health
from onesignal_gateway.core.payloads import DEFAULT_COMPANY_NAME, UserRecord
from onesignal_gateway.core.validation import is_missing, normalize_recipients, require_fields
from onesignal_gateway.dependencies import ClockDep, JourneysServiceDep
from onesignal_gateway.models.journeys import (
    ConnectionTestResponse,
    CreateUserRequest,
    CreateUserResponse,
    TriggerJourneyRequest,
    TriggerJourneyResponse,
)
from onesignal_gateway.services.journeys_service import (
    DEFAULT_SEGMENT_TAG,
    DEFAULT_SEGMENT_VALUE,
)
from onesignal_gateway.utils.errors import MissingFieldsError

router = APIRouter(prefix="/journeys", tags=["journeys"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def journeys_health(clock: ClockDep):
    """Liveness probe for the journeys subsystem."""
    return subsystem_health("journeys", clock)


@router.get(
    "/test-connection",
    response_model=ConnectionTestResponse,
    summary="Test OneSignal connectivity",
    description=(
        "Try the current API first and the legacy API second. Reports the first "
        "path that works, or every failure with a remediation hint."
    ),
    responses={500: {"description": "Every probe strategy failed"}},
)
async def test_connection(service: JourneysServiceDep):
    result = await service.test_connection()

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "OneSignal API connection failed",
                "message": "; ".join(f"{name}: {error}" for name, error in result.failures.items()),
                "failures": result.failures,
                "suggestion": result.suggestion,
                "success": False,
            },
        )

    return ConnectionTestResponse(
        message="OneSignal API connection successful",
        api=result.api,
        url=result.url,
        app_name=(result.app or {}).get("name"),
    )


@router.post(
    "/create-user",
    response_model=CreateUserResponse,
    summary="Create user for journey testing",
)
async def create_user(
    request: CreateUserRequest, service: JourneysServiceDep
) -> CreateUserResponse:
    require_fields(request.model_dump(by_alias=True), ["externalId", "email", "firstName"])
    normalize_recipients(request.email)

    result = await service.create_user(
        UserRecord(
            external_id=request.external_id,
            email=request.email,
            first_name=request.first_name,
            company_name=request.company_name or DEFAULT_COMPANY_NAME,
        )
    )

    return CreateUserResponse(
        message="User created successfully",
        external_id=request.external_id,
        email=request.email,
        user=result,
    )


@router.post(
    "/trigger-journey",
    response_model=TriggerJourneyResponse,
    summary="Trigger journey by tagging user",
)
async def trigger_journey(
    request: TriggerJourneyRequest, service: JourneysServiceDep
) -> TriggerJourneyResponse:
    require_fields(request.model_dump(by_alias=True), ["externalId"])

    segment_tag = DEFAULT_SEGMENT_TAG if request.segment_tag is None else request.segment_tag
    if is_missing(segment_tag):
        raise MissingFieldsError(["segmentTag"])
    segment_value = DEFAULT_SEGMENT_VALUE if request.segment_value is None else request.segment_value
    await service.trigger_journey(request.external_id, segment_tag, segment_value)

    return TriggerJourneyResponse(
        message="Journey triggered - user added to segment",
        external_id=request.external_id,
        segment_tag=segment_tag,
        segment_value=segment_value,
        note="Journey will execute automatically based on your OneSignal Journey setup",
    )

"""API routes for the interaction webhook."""
import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from grant.api.schemas import Interaction, SignatureErrorResponse
from grant.config import Settings, get_settings
from grant.database import get_db
from grant.services.audit import AuditTrail
from grant.services.dispatcher import InteractionDispatcher, internal_error
from grant.services.role_gate import RoleGate
from grant.services.roster import OfficerRoster
from grant.services.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter()


def get_dispatcher(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> InteractionDispatcher:
    """Dependency wiring one request's dispatcher onto its database session."""
    return InteractionDispatcher(
        roster=OfficerRoster(db),
        audit=AuditTrail(db),
        gate=RoleGate(settings.role_policy),
        developer_ids=settings.developer_ids,
    )


@router.post("/interactions", responses={
    401: {"model": SignatureErrorResponse, "description": "Missing or invalid request signature"}
})
async def interactions(
    request: Request,
    settings: Settings = Depends(get_settings),
    dispatcher: InteractionDispatcher = Depends(get_dispatcher)
):
    """
    Receive one signed interaction.

    The signature is checked against the raw body before anything is
    parsed. Internal faults return 500 with a generic body only.
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER, "")
    timestamp = request.headers.get(TIMESTAMP_HEADER, "")

    if not verify_signature(settings.discord_public_key, timestamp, body, signature):
        logger.warning("Rejected interaction with invalid signature")
        return JSONResponse(
            SignatureErrorResponse().model_dump(),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        interaction = Interaction.model_validate(json.loads(body))
    except (ValueError, ValidationError):
        logger.exception("Signed interaction body could not be parsed")
        return JSONResponse(
            internal_error().to_payload(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Dispatch does blocking database work; keep it off the event loop
    result = await run_in_threadpool(dispatcher.handle, interaction)
    return JSONResponse(result.response.to_payload(), status_code=result.status_code)

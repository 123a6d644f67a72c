from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.ingestors.api import ApiIngestor
from circular_democracy.models.message import ErrorResponse, MessageInput, MessageResponse
from circular_democracy.models.outcome import (
    ContentTooShort,
    Duplicate,
    PoliticianNotFound,
    Processed,
    ProcessingError,
)
from circular_democracy.pipeline.embeddings import get_embedder
from circular_democracy.pipeline.orchestrator import process_message

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


@router.post(
    "",
    response_model=MessageResponse,
    responses={
        400: {"model": MessageResponse, "description": "Message content too short"},
        404: {"model": MessageResponse, "description": "Politician not found"},
        409: {"model": MessageResponse, "description": "Duplicate message"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Process incoming citizen message",
    description=(
        "Receives a citizen message, classifies it by campaign, "
        "and stores it for politician response"
    ),
)
async def create_message(
    body: MessageInput,
    db: Datastore = Depends(get_datastore),
    embed=Depends(get_embedder),
):
    message = ApiIngestor().to_messages(body)[0]
    outcome = await process_message(message, db=db, embed=embed)

    if isinstance(outcome, Processed):
        return MessageResponse(
            success=True,
            message_id=outcome.message_id,
            status="processed",
            campaign_id=outcome.classification.campaign_id,
            campaign_name=outcome.classification.campaign_name,
            confidence=outcome.classification.confidence,
            duplicate_rank=outcome.duplicate_rank,
        )

    if isinstance(outcome, Duplicate):
        return _message_error(
            409, "duplicate", f"Message with external_id {body.external_id} already exists"
        )

    if isinstance(outcome, PoliticianNotFound):
        return _message_error(
            404, "politician_not_found", f"No politician found for email: {body.recipient_email}"
        )

    if isinstance(outcome, ContentTooShort):
        return _message_error(400, "failed", "Message content is too short")

    if isinstance(outcome, ProcessingError):
        logger.error(f"Message {body.external_id} failed: {outcome.reason}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error", details=outcome.reason
            ).model_dump(),
        )

    raise AssertionError(f"Unhandled ingestion outcome: {outcome!r}")


def _message_error(status_code: int, status: str, error: str) -> JSONResponse:
    body = MessageResponse(success=False, status=status, errors=[error])
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))

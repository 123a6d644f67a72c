"""Mail-hook aggregation: one inbound email, many recipients, one decision.

Every envelope recipient is processed independently and concurrently. Once all
runs have finished, the outcome with the highest confidence wins (first seen on
ties) and is turned into a mailbox folder plus diagnostic headers for the MTA.
"""
import asyncio
import re
from loguru import logger
from circular_democracy.config import get_settings
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.ingestors.stalwart import StalwartIngestor
from circular_democracy.models.message import InboundMessage
from circular_democracy.models.outcome import (
    ContentTooShort,
    Duplicate,
    IngestionOutcome,
    PoliticianNotFound,
    Processed,
    ProcessingError,
)
from circular_democracy.models.stalwart import HookModifications, HookResponse, StalwartHook
from circular_democracy.pipeline.embeddings import generate_embedding
from circular_democracy.pipeline.orchestrator import Embedder, process_message

BASE_FOLDER = "CircularDemocracy"
SYSTEM_FOLDER = f"{BASE_FOLDER}/System"
CAMPAIGN_FOLDER_MAX_LENGTH = 50

HEADER_PREFIX = "X-CircularDemocracy-"
STATUS_HEADER = f"{HEADER_PREFIX}Status"
CAMPAIGN_HEADER = f"{HEADER_PREFIX}Campaign"
CONFIDENCE_HEADER = f"{HEADER_PREFIX}Confidence"
DUPLICATE_RANK_HEADER = f"{HEADER_PREFIX}Duplicate-Rank"
MESSAGE_ID_HEADER = f"{HEADER_PREFIX}Message-ID"
POLITICIAN_HEADER = f"{HEADER_PREFIX}Politician"
ERROR_HEADER = f"{HEADER_PREFIX}Error"

# Confidence of the non-processed outcomes when competing for the final decision
OUTCOME_CONFIDENCE = {
    Duplicate: 1.0,
    PoliticianNotFound: 0.0,
    ContentTooShort: 0.1,
    ProcessingError: 0.0,
}

SYSTEM_ROUTES = {
    Duplicate: ("Duplicates", "duplicate"),
    PoliticianNotFound: ("Unknown", "politician-not-found"),
    ContentTooShort: ("TooShort", "message-too-short"),
    ProcessingError: ("ProcessingError", "error"),
}


def outcome_confidence(outcome: IngestionOutcome) -> float:
    if isinstance(outcome, Processed):
        return outcome.classification.confidence
    return OUTCOME_CONFIDENCE[type(outcome)]


def select_best_outcome(outcomes: list[IngestionOutcome]) -> IngestionOutcome:
    """Highest confidence wins; ties keep the earliest recipient's outcome."""
    if not outcomes:
        return PoliticianNotFound()

    best = outcomes[0]
    for outcome in outcomes[1:]:
        if outcome_confidence(outcome) > outcome_confidence(best):
            best = outcome
    return best


def campaign_folder_name(campaign_name: str) -> str:
    folder = re.sub(r"[^a-zA-Z0-9\-_\s]", "", campaign_name)
    folder = re.sub(r"\s+", "-", folder)
    return folder[:CAMPAIGN_FOLDER_MAX_LENGTH]


def folder_for_outcome(outcome: IngestionOutcome) -> str:
    if not isinstance(outcome, Processed):
        return f"{SYSTEM_FOLDER}/{SYSTEM_ROUTES[type(outcome)][0]}"

    folder = f"{BASE_FOLDER}/{campaign_folder_name(outcome.classification.campaign_name)}"
    if outcome.duplicate_rank > 0:
        return f"{folder}/Duplicates"
    if outcome.classification.confidence < get_settings().low_confidence_threshold:
        return f"{folder}/LowConfidence"
    return folder


def headers_for_outcome(outcome: IngestionOutcome, external_id: str) -> dict[str, str]:
    if isinstance(outcome, Processed):
        return {
            CAMPAIGN_HEADER: outcome.classification.campaign_name,
            CONFIDENCE_HEADER: str(outcome.classification.confidence),
            DUPLICATE_RANK_HEADER: str(outcome.duplicate_rank),
            MESSAGE_ID_HEADER: external_id,
            POLITICIAN_HEADER: outcome.politician_name,
            STATUS_HEADER: "processed",
        }

    headers = {STATUS_HEADER: SYSTEM_ROUTES[type(outcome)][1]}
    if isinstance(outcome, ProcessingError):
        headers[ERROR_HEADER] = outcome.reason
    return headers


def build_hook_response(outcome: IngestionOutcome, external_id: str) -> HookResponse:
    return HookResponse(
        action="accept",
        confidence=outcome_confidence(outcome),
        modifications=HookModifications(
            folder=folder_for_outcome(outcome),
            headers=headers_for_outcome(outcome, external_id),
        ),
    )


def error_hook_response(reason: str) -> HookResponse:
    """Accept the email anyway; the failure travels only in the headers."""
    return HookResponse(
        action="accept",
        confidence=0.0,
        error=reason,
        modifications=HookModifications(
            folder=f"{SYSTEM_FOLDER}/ProcessingError",
            headers={STATUS_HEADER: "error", ERROR_HEADER: reason},
        ),
    )


async def _process_recipients(
    messages: list[InboundMessage],
    db: Datastore,
    embed: Embedder,
) -> list[IngestionOutcome]:
    results = await asyncio.gather(
        *(process_message(message, db=db, embed=embed) for message in messages),
        return_exceptions=True,
    )

    outcomes: list[IngestionOutcome] = []
    for message, result in zip(messages, results):
        if isinstance(result, BaseException):
            logger.error(f"Processing failed for recipient {message.recipient_email}: {result}")
            outcomes.append(ProcessingError(reason=str(result) or type(result).__name__))
        else:
            outcomes.append(result)
    return outcomes


async def handle_mail_hook(
    hook: StalwartHook,
    db: Datastore | None = None,
    embed: Embedder = generate_embedding,
) -> HookResponse:
    """Route one inbound email and tell the MTA where to file it."""
    db = db or get_datastore()
    messages = StalwartIngestor().to_messages(hook)

    outcomes = await _process_recipients(messages, db, embed)
    best = select_best_outcome(outcomes)
    response = build_hook_response(best, hook.messageId)

    logger.info(
        f"Email {hook.messageId} routed for {len(messages)} recipient(s): "
        f"status={response.modifications.headers[STATUS_HEADER]}, "
        f"folder={response.modifications.folder}, confidence={response.confidence}"
    )
    return response

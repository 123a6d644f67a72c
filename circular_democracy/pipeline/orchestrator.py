import time
from typing import Awaitable, Callable
from loguru import logger
from circular_democracy.config import get_settings
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.exceptions import (
    ClassificationUnavailableError,
    DatastoreError,
    EmbeddingError,
    PersistenceError,
)
from circular_democracy.models.message import InboundMessage, MessageInsert
from circular_democracy.models.outcome import (
    ContentTooShort,
    Duplicate,
    IngestionOutcome,
    PoliticianNotFound,
    Processed,
    ProcessingError,
)
from circular_democracy.pipeline.classifier import classify_message
from circular_democracy.pipeline.duplicates import duplicate_rank, is_transport_duplicate
from circular_democracy.pipeline.embeddings import generate_embedding
from circular_democracy.pipeline.identity import hash_email
from circular_democracy.pipeline.recipients import resolve_recipient

DEFAULT_CHANNEL_SOURCE = "unknown"

Embedder = Callable[[str], Awaitable[list[float]]]


async def process_message(
    message: InboundMessage,
    db: Datastore | None = None,
    embed: Embedder = generate_embedding,
) -> IngestionOutcome:
    """Run one (message, recipient) pair through the ingestion pipeline.

    Pipeline:
    1. Transport duplicate check (external id + channel source)
    2. Resolve the recipient to an active politician
    3. Reject content shorter than the minimum length
    4. Embed the message text
    5. Classify into a campaign
    6. Hash the sender and count earlier messages for the same triple
    7. Persist the message

    Nothing is written until step 7, so any earlier stop leaves no trace.
    Returns exactly one outcome; unexpected faults become ProcessingError.
    """
    try:
        return await _run_pipeline(message, db or get_datastore(), embed)
    except Exception as e:
        logger.exception(f"Unexpected failure processing message {message.external_id}")
        return ProcessingError(reason=str(e) or type(e).__name__)


async def _run_pipeline(
    message: InboundMessage,
    db: Datastore,
    embed: Embedder,
) -> IngestionOutcome:
    start_time = time.time()
    settings = get_settings()
    channel_source = message.channel_source or DEFAULT_CHANNEL_SOURCE

    if await is_transport_duplicate(db, message.external_id, channel_source):
        logger.info(f"Duplicate message {message.external_id} from {channel_source}")
        return Duplicate()

    politician = await resolve_recipient(db, message.recipient_email)
    if politician is None:
        logger.info(f"No politician found for {message.recipient_email}")
        return PoliticianNotFound()

    content = message.body.strip()
    if len(content) < settings.min_message_length:
        logger.info(
            f"Message {message.external_id} too short ({len(content)} chars)"
        )
        return ContentTooShort()

    try:
        embedding = await embed(content[: settings.embedding_max_chars])
    except EmbeddingError as e:
        logger.error(f"Embedding failed for message {message.external_id}: {e}")
        return ProcessingError(reason=str(e))

    try:
        classification = await classify_message(db, embedding, message.campaign_hint)
    except ClassificationUnavailableError as e:
        return ProcessingError(reason=str(e))

    sender_hash = hash_email(message.sender_email)
    rank = await duplicate_rank(db, sender_hash, politician.id, classification.campaign_id)

    row = MessageInsert(
        external_id=message.external_id,
        channel=message.channel,
        channel_source=channel_source,
        politician_id=politician.id,
        sender_hash=sender_hash,
        campaign_id=classification.campaign_id,
        classification_confidence=classification.confidence,
        message_embedding=embedding,
        received_at=message.sent_at,
        duplicate_rank=rank,
    )

    try:
        message_id = await _store_message(db, row)
    except PersistenceError as e:
        return ProcessingError(reason=str(e))

    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Stored message {message_id} (external_id={message.external_id}, "
        f"politician={politician.id}, campaign={classification.campaign_id}, "
        f"confidence={classification.confidence:.2f}, rank={rank}) in {elapsed_ms}ms"
    )

    return Processed(
        message_id=message_id,
        classification=classification,
        duplicate_rank=rank,
        politician_name=politician.name,
    )


async def _store_message(db: Datastore, row: MessageInsert) -> int:
    try:
        return await db.insert_message(row)
    except DatastoreError as e:
        logger.error(f"Failed to store message {row.external_id}: {e}")
        raise PersistenceError("Failed to store message in database") from e

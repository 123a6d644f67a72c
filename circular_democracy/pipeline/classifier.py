"""Campaign classification cascade.

Stages run in order and the first match wins:

1. hint: campaign whose name or slug contains the sender's hint
2. similarity: nearest campaign reference vector above the promotion threshold
3. fallback: the "uncategorized" bucket, created on first use

Each stage returns Matched, NotMatched or Unavailable. CASCADE pairs every
stage with the policy applied when it is Unavailable: SOFT moves on to the
next stage, FATAL aborts classification.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Union
from loguru import logger
from circular_democracy.config import Settings, get_settings
from circular_democracy.datastore import Datastore
from circular_democracy.exceptions import ClassificationUnavailableError, DatastoreError
from circular_democracy.models.campaign import (
    CampaignMatch,
    ClassificationResult,
    FALLBACK_CAMPAIGN_NAME,
    FALLBACK_CAMPAIGN_SLUG,
)

# Score given to unranked candidates when the similarity search is down.
# It is never above the promotion threshold.
DEGRADED_SIMILARITY = 0.1


@dataclass(frozen=True)
class Matched:
    result: ClassificationResult


@dataclass(frozen=True)
class NotMatched:
    pass


@dataclass(frozen=True)
class Unavailable:
    reason: str


StageResult = Union[Matched, NotMatched, Unavailable]


class StagePolicy(str, Enum):
    SOFT = "soft"
    FATAL = "fatal"


async def hint_stage(
    db: Datastore, embedding: list[float], hint: str | None, settings: Settings
) -> StageResult:
    if not hint or not hint.strip():
        return NotMatched()

    try:
        campaign = await db.find_campaign_by_hint(hint.strip())
    except DatastoreError as e:
        return Unavailable(str(e))

    if campaign is None:
        return NotMatched()

    return Matched(
        ClassificationResult(
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            confidence=settings.hint_confidence,
        )
    )


async def similarity_stage(
    db: Datastore, embedding: list[float], hint: str | None, settings: Settings
) -> StageResult:
    try:
        candidates = await db.find_similar_campaigns(
            embedding, settings.similarity_floor, settings.similarity_top_k
        )
    except DatastoreError as e:
        logger.warning(f"Similarity search failed, using unranked candidates: {e}")
        try:
            candidates = [
                CampaignMatch(**campaign.model_dump(), similarity=DEGRADED_SIMILARITY)
                for campaign in await db.list_reference_campaigns(settings.similarity_top_k)
            ]
        except DatastoreError as fallback_error:
            return Unavailable(str(fallback_error))

    if not candidates:
        return NotMatched()

    best = max(candidates, key=lambda c: c.similarity)
    if best.similarity <= settings.similarity_threshold:
        logger.debug(
            f"Best campaign {best.id} similarity {best.similarity:.3f} "
            f"below threshold {settings.similarity_threshold}"
        )
        return NotMatched()

    return Matched(
        ClassificationResult(
            campaign_id=best.id,
            campaign_name=best.name,
            confidence=min(best.similarity, 1.0),
        )
    )


async def fallback_stage(
    db: Datastore, embedding: list[float], hint: str | None, settings: Settings
) -> StageResult:
    try:
        campaign = await db.get_campaign_by_slug(FALLBACK_CAMPAIGN_SLUG)
        if campaign is None:
            campaign = await db.ensure_campaign(
                {
                    "name": FALLBACK_CAMPAIGN_NAME,
                    "slug": FALLBACK_CAMPAIGN_SLUG,
                    "description": "Messages that could not be automatically categorized",
                    "status": "active",
                    "created_by": "system",
                }
            )
            logger.info(f"Fallback campaign ready (id={campaign.id})")
    except DatastoreError as e:
        return Unavailable(str(e))

    return Matched(
        ClassificationResult(
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            confidence=settings.fallback_confidence,
        )
    )


Stage = Callable[[Datastore, list[float], Optional[str], Settings], Awaitable[StageResult]]

CASCADE: tuple[tuple[str, Stage, StagePolicy], ...] = (
    ("hint", hint_stage, StagePolicy.SOFT),
    ("similarity", similarity_stage, StagePolicy.SOFT),
    ("fallback", fallback_stage, StagePolicy.FATAL),
)


async def classify_message(
    db: Datastore,
    embedding: list[float],
    hint: str | None = None,
) -> ClassificationResult:
    """Assign a message embedding to a campaign.

    Raises:
        ClassificationUnavailableError: only when the fallback campaign cannot
            be read or created.
    """
    settings = get_settings()

    for name, stage, policy in CASCADE:
        try:
            outcome = await stage(db, embedding, hint, settings)
        except Exception as e:
            outcome = Unavailable(f"{name} stage raised: {e}")

        if isinstance(outcome, Matched):
            logger.info(
                f"Classified by {name} stage: campaign {outcome.result.campaign_id} "
                f"({outcome.result.campaign_name}), confidence {outcome.result.confidence:.2f}"
            )
            return outcome.result

        if isinstance(outcome, Unavailable):
            if policy is StagePolicy.FATAL:
                logger.error(f"Classification {name} stage unavailable: {outcome.reason}")
                raise ClassificationUnavailableError(
                    "Failed to get or create uncategorized campaign"
                )
            logger.warning(f"Classification {name} stage unavailable, continuing: {outcome.reason}")

    raise ClassificationUnavailableError("No classification stage produced a campaign")

from loguru import logger
from circular_democracy.datastore import Datastore
from circular_democracy.exceptions import DatastoreError


async def is_transport_duplicate(db: Datastore, external_id: str, channel_source: str) -> bool:
    """True if this exact (external id, channel source) was already stored.

    Fails soft to False: duplicate bookkeeping must never block acceptance.
    """
    try:
        return await db.external_id_exists(external_id, channel_source)
    except DatastoreError as e:
        logger.error(f"External id check failed for {external_id} ({channel_source}): {e}")
        return False


async def duplicate_rank(db: Datastore, sender_hash: str, politician_id: int, campaign_id: int) -> int:
    """Number of messages already stored for this sender/politician/campaign.

    0 means first occurrence. Fails soft to 0.
    """
    try:
        return await db.count_messages(sender_hash, politician_id, campaign_id)
    except DatastoreError as e:
        logger.error(
            f"Duplicate rank count failed for sender {sender_hash[:12]}, "
            f"politician {politician_id}, campaign {campaign_id}: {e}"
        )
        return 0

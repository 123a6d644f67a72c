from loguru import logger
from circular_democracy.datastore import Datastore
from circular_democracy.exceptions import DatastoreError
from circular_democracy.models.politician import Politician


async def resolve_recipient(db: Datastore, email: str) -> Politician | None:
    """Find the active politician a message is addressed to.

    Tries the primary address first, then the alias list. Storage errors are
    reported as "not found" so a resolver outage never raises to the caller.
    """
    try:
        politician = await db.find_active_politician_by_email(email)
        if politician:
            return politician

        politician = await db.find_active_politician_by_alias(email)
        if politician:
            logger.info(f"Recipient {email} matched politician {politician.id} by alias")
        return politician
    except DatastoreError as e:
        logger.error(f"Politician lookup failed for {email}, treating as not found: {e}")
        return None

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from loguru import logger
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.models.stalwart import HookResponse, StalwartHook
from circular_democracy.pipeline.embeddings import get_embedder
from circular_democracy.pipeline.mail_hook import error_hook_response, handle_mail_hook

router = APIRouter(prefix="/stalwart", tags=["Stalwart"])


@router.post(
    "/mta-hook",
    response_model=HookResponse,
    response_model_exclude_none=True,
    summary="MTA Hook for incoming emails",
    description="Processes incoming emails and provides routing instructions",
)
async def mta_hook(
    request: Request,
    db: Datastore = Depends(get_datastore),
    embed=Depends(get_embedder),
):
    """Handle a Stalwart MTA hook call.

    The body is parsed here rather than by FastAPI so that malformed payloads
    also get an accept decision. The MTA must never see a failure from this
    endpoint, or it may drop the original email.
    """
    try:
        hook = StalwartHook.model_validate(await request.json())
        logger.info(f"Processing email {hook.messageId} for {len(hook.recipients)} recipient(s)")
        return await handle_mail_hook(hook, db=db, embed=embed)
    except Exception as e:
        logger.exception("MTA hook processing error")
        return error_hook_response(str(e) or type(e).__name__)


@router.get("/health")
async def stalwart_health():
    return {
        "status": "ok",
        "service": "stalwart-hook",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

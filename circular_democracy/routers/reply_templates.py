from fastapi import APIRouter, Depends, HTTPException
from circular_democracy.auth import get_current_user
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.models.reply_template import ReplyTemplateCreate, ReplyTemplateResponse

router = APIRouter(prefix="/api/v1/reply-templates", tags=["Reply Templates"])


@router.get("", response_model=list[ReplyTemplateResponse])
async def list_reply_templates(
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    return await db.list_reply_templates()


@router.get("/{template_id}", response_model=ReplyTemplateResponse)
async def get_reply_template(
    template_id: int,
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    template = await db.get_reply_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Reply template not found")
    return template


@router.post("", response_model=ReplyTemplateResponse, status_code=201)
async def create_reply_template(
    body: ReplyTemplateCreate,
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    return await db.create_reply_template(body.model_dump())

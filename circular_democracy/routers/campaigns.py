from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from circular_democracy.auth import get_current_user
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.exceptions import DatastoreError
from circular_democracy.models.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignStatsResponse,
)

router = APIRouter(prefix="/api/v1/campaigns", tags=["Campaigns"])


@router.get("", response_model=list[CampaignResponse])
async def list_campaigns(
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    return await db.list_campaigns()


@router.get(
    "/stats",
    response_model=CampaignStatsResponse,
    tags=["Statistics"],
    summary="Get campaign statistics",
)
async def campaign_stats(
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    try:
        stats = await db.campaign_stats()
    except DatastoreError as e:
        logger.error(f"Campaign statistics unavailable: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")
    return {"campaigns": stats}


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: int,
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    campaign = await db.get_campaign(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.post("", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    body: CampaignCreate,
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    data = body.model_dump(exclude_none=True)
    data["created_by"] = user["user_id"]
    return await db.create_campaign(data)

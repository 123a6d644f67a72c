from fastapi import APIRouter, Depends, HTTPException
from circular_democracy.auth import get_current_user
from circular_democracy.datastore import Datastore, get_datastore
from circular_democracy.models.politician import PoliticianResponse

router = APIRouter(prefix="/api/v1/politicians", tags=["Politicians"])


@router.get("", response_model=list[PoliticianResponse])
async def list_politicians(
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    return await db.list_politicians()


@router.get("/{politician_id}", response_model=PoliticianResponse)
async def get_politician(
    politician_id: int,
    user: dict = Depends(get_current_user),
    db: Datastore = Depends(get_datastore),
):
    politician = await db.get_politician(politician_id)
    if not politician:
        raise HTTPException(status_code=404, detail="Politician not found")
    return politician

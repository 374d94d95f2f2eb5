from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from ..schemas.artifacts import ArtifactIn, ArtifactUpdateIn, ArtifactOut, ArtifactListOut, ValuesOut
from ..schemas.common import MessageOut, MAX_PAGE, ResourceId, page_info
from ..crud import (
    list_artifacts,
    distinct_artifact_values,
    get_artifact,
    create_artifact,
    update_artifact,
    delete_artifact,
)
from ..permissions import require_contributor
from ..auth import get_current_user
from ..models.users import User

router = APIRouter()


@router.get('', response_model=ArtifactListOut)
async def index(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(12, ge=1, le=100),
    sort: Literal['newest', 'oldest', 'name', 'category'] = 'newest',
    category: Optional[str] = Query(None, max_length=100),
    period: Optional[str] = Query(None, max_length=100),
    search: Optional[str] = Query(None, max_length=200),
):
    artifacts, total = await list_artifacts(page, limit, sort, category=category, period=period, search=search)
    return {'artifacts': artifacts, 'pagination': {**page_info(page, limit, total), 'total_artifacts': total}}


@router.get('/categories', response_model=ValuesOut)
async def categories():
    return {'values': await distinct_artifact_values('category')}


@router.get('/periods', response_model=ValuesOut)
async def periods():
    return {'values': await distinct_artifact_values('period')}


@router.get('/{artifact_id}', response_model=ArtifactOut)
async def detail(artifact_id: ResourceId):
    return await get_artifact(artifact_id)


@router.post('', response_model=ArtifactOut, status_code=201)
async def create(payload: ArtifactIn, current_user: User = Depends(require_contributor)):
    return await create_artifact(payload, current_user)


@router.put('/{artifact_id}', response_model=ArtifactOut)
async def update(artifact_id: ResourceId, payload: ArtifactUpdateIn, current_user: User = Depends(get_current_user)):
    return await update_artifact(artifact_id, payload, current_user)


@router.delete('/{artifact_id}', response_model=MessageOut)
async def remove(artifact_id: ResourceId, current_user: User = Depends(get_current_user)):
    await delete_artifact(artifact_id, current_user)
    return {'message': 'Artifact deleted successfully'}

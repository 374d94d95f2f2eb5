from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from ..schemas.articles import (
    ArticleIn,
    ArticleUpdateIn,
    ArticleOut,
    ArticleDetailOut,
    ArticleListOut,
    DraftListOut,
)
from ..schemas.comments import CommentListOut
from ..schemas.common import MessageOut, MAX_ID, MAX_PAGE, ResourceId, page_info
from ..crud import (
    list_articles,
    get_published_article,
    create_article,
    update_article,
    delete_article,
    list_drafts,
    list_comments,
)
from ..permissions import require_contributor
from ..auth import get_current_user
from ..models.users import User

router = APIRouter()


@router.get('', response_model=ArticleListOut)
async def index(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    sort: Literal['newest', 'oldest', 'title', 'views'] = 'newest',
    author: Optional[int] = Query(None, ge=1, le=MAX_ID),
    search: Optional[str] = Query(None, max_length=200),
):
    articles, total = await list_articles(page, limit, sort, author_id=author, search=search)
    return {'articles': articles, 'pagination': {**page_info(page, limit, total), 'total_articles': total}}


@router.get('/drafts', response_model=DraftListOut)
async def drafts(current_user: User = Depends(require_contributor)):
    items = await list_drafts(current_user)
    return {'drafts': items, 'count': len(items)}


@router.post('', response_model=ArticleOut, status_code=201)
async def create(payload: ArticleIn, current_user: User = Depends(require_contributor)):
    return await create_article(payload, current_user)


@router.get('/{article_id}/comments', response_model=CommentListOut)
async def comments(
    article_id: ResourceId,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    sort: Literal['newest', 'oldest', 'likes'] = 'newest',
):
    threads, total = await list_comments(article_id, page, limit, sort)
    return {'comments': threads, 'pagination': {**page_info(page, limit, total), 'total_comments': total}}


@router.get('/{slug}', response_model=ArticleDetailOut)
async def detail(slug: str):
    return await get_published_article(slug)


@router.put('/{article_id}', response_model=ArticleOut)
async def update(article_id: ResourceId, payload: ArticleUpdateIn, current_user: User = Depends(get_current_user)):
    return await update_article(article_id, payload, current_user)


@router.delete('/{article_id}', response_model=MessageOut)
async def remove(article_id: ResourceId, current_user: User = Depends(get_current_user)):
    await delete_article(article_id, current_user)
    return {'message': 'Article deleted successfully'}

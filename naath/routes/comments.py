from fastapi import APIRouter, Depends
from ..schemas.comments import (
    CommentIn,
    CommentUpdateIn,
    CommentOut,
    CommentCreatedOut,
    LikeOut,
    ApprovalOut,
    PendingListOut,
)
from ..schemas.common import MessageOut, ResourceId
from ..crud import (
    create_comment,
    update_comment,
    delete_comment,
    toggle_comment_like,
    approve_comment,
    list_pending_comments,
)
from ..auth import get_current_user
from ..permissions import require_admin
from ..models.users import User

router = APIRouter()


@router.get('/pending', response_model=PendingListOut)
async def pending(_admin: User = Depends(require_admin)):
    """Comments awaiting moderation, oldest first."""
    comments = await list_pending_comments()
    return {'pending_comments': comments, 'count': len(comments)}


@router.post('', response_model=CommentCreatedOut, status_code=201)
async def create(payload: CommentIn, current_user: User = Depends(get_current_user)):
    comment = await create_comment(current_user, payload.article_id, payload.content, payload.parent_id)
    message = 'Comment created successfully' if comment['is_approved'] else 'Comment submitted for approval'
    return {'message': message, 'comment': comment}


@router.put('/{comment_id}', response_model=CommentOut)
async def update(comment_id: ResourceId, payload: CommentUpdateIn, current_user: User = Depends(get_current_user)):
    return await update_comment(comment_id, payload.content, current_user)


@router.delete('/{comment_id}', response_model=MessageOut)
async def remove(comment_id: ResourceId, current_user: User = Depends(get_current_user)):
    await delete_comment(comment_id, current_user)
    return {'message': 'Comment deleted successfully'}


@router.post('/{comment_id}/like', response_model=LikeOut)
async def like(comment_id: ResourceId, current_user: User = Depends(get_current_user)):
    liked, count = await toggle_comment_like(comment_id, current_user)
    message = 'Comment liked successfully' if liked else 'Comment unliked successfully'
    return {'liked': liked, 'likes_count': count, 'message': message}


@router.put('/{comment_id}/approve', response_model=ApprovalOut)
async def approve(comment_id: ResourceId, admin: User = Depends(require_admin)):
    return await approve_comment(comment_id, admin)

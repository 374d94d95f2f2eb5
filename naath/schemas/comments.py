from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, Field
from .common import CamelModel, PageInfo, MAX_ID

MAX_COMMENT_LENGTH = 1000

def _clean_content(value: str) -> str:
    value = value.strip()
    if not value or len(value) > MAX_COMMENT_LENGTH:
        raise ValueError(f'Comment content is required and must be at most {MAX_COMMENT_LENGTH} characters')
    return value

CommentContent = Annotated[str, AfterValidator(_clean_content)]

class CommentIn(CamelModel):
    content: CommentContent
    article_id: int = Field(gt=0, le=MAX_ID)
    parent_id: Optional[int] = Field(None, gt=0, le=MAX_ID)

class CommentUpdateIn(CamelModel):
    content: CommentContent

class AuthorOut(CamelModel):
    id: int
    username: str
    first_name: str
    last_name: str

class CommentOut(CamelModel):
    id: int
    content: str
    article_id: int
    parent_id: Optional[int] = None
    is_approved: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: AuthorOut

class CommentCreatedOut(CamelModel):
    message: str
    comment: CommentOut

class ReplyOut(CamelModel):
    id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: AuthorOut
    likes_count: int

class ThreadOut(ReplyOut):
    replies_count: int
    replies: List[ReplyOut]

class CommentPagination(PageInfo):
    total_comments: int

class CommentListOut(CamelModel):
    comments: List[ThreadOut]
    pagination: CommentPagination

class LikeOut(CamelModel):
    liked: bool
    likes_count: int
    message: str

class ApprovalOut(CamelModel):
    id: int
    is_approved: bool

class ArticleRefOut(CamelModel):
    id: int
    title: str
    slug: str

class PendingCommentOut(CamelModel):
    id: int
    content: str
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    author: AuthorOut
    article: ArticleRefOut

class PendingListOut(CamelModel):
    pending_comments: List[PendingCommentOut]
    count: int

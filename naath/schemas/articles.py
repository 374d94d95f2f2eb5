from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, Field, HttpUrl
from .common import CamelModel, PageInfo
from .comments import AuthorOut
from ..models.articles import ArticleStatus

UrlStr = Annotated[HttpUrl, AfterValidator(str)]


class ArticleIn(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    tags: List[str] = Field(default_factory=list)
    featured_image_url: Optional[UrlStr] = None


class ArticleUpdateIn(CamelModel):
    """Partial update; only fields present in the request body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
    featured_image_url: Optional[UrlStr] = None
    status: Optional[ArticleStatus] = None


class ArticleSummaryOut(CamelModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    tags: List[str] = []
    status: str
    view_count: int
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ArticleOut(ArticleSummaryOut):
    content: str
    author_id: int


class ArticleListItemOut(ArticleSummaryOut):
    author: AuthorOut


class ArticleDetailOut(ArticleOut):
    author: AuthorOut
    comments_count: int


class ArticlePagination(PageInfo):
    total_articles: int


class ArticleListOut(CamelModel):
    articles: List[ArticleListItemOut]
    pagination: ArticlePagination


class DraftListOut(CamelModel):
    drafts: List[ArticleSummaryOut]
    count: int

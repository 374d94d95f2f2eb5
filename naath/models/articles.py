import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, CheckConstraint, func
from . import Base


class ArticleStatus(str, enum.Enum):
    DRAFT = 'draft'
    PUBLISHED = 'published'
    ARCHIVED = 'archived'


class Article(Base):
    __tablename__ = 'articles'
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    featured_image_url = Column(String(500), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    status = Column(String(20), nullable=False, default=ArticleStatus.DRAFT.value,
                    server_default=ArticleStatus.DRAFT.value, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    view_count = Column(Integer, nullable=False, default=0, server_default='0')
    # approved comments only, kept in step by the comment operations
    comment_count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'archived')", name='ck_articles_status'),
    )

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, func, false
from . import Base

class Comment(Base):
    __tablename__ = 'comments'
    id = Column(Integer, primary_key=True, index=True)
    article_id = Column(Integer, ForeignKey('articles.id', ondelete='CASCADE'), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    parent_id = Column(Integer, ForeignKey('comments.id', ondelete='CASCADE'), index=True, nullable=True)
    content = Column(Text, nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

import re
import uuid
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func, update, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from .models import AsyncSessionLocal
from .models.users import User, Role
from .models.articles import Article, ArticleStatus
from .models.comments import Comment
from .models.comment_likes import CommentLike
from .models.artifacts import Artifact
from .auth import hash_password, verify_password
from .errors import ValidationFailed, InvalidCredential, NotFound
from .permissions import ensure_owner_or_admin
from .storage import storage_operation
from . import core

logger = logging.getLogger(__name__)

# Columns a client may write through a partial update, per resource
ARTICLE_MUTABLE_FIELDS = frozenset({'title', 'content', 'excerpt', 'tags', 'featured_image_url', 'status'})
ARTICLE_REQUIRED_FIELDS = frozenset({'title', 'content', 'tags', 'status'})
ARTIFACT_MUTABLE_FIELDS = frozenset({
    'name', 'description', 'category', 'period', 'location', 'image_urls', 'video_url',
    'audio_url', 'dimensions', 'material', 'condition_notes', 'acquisition_date', 'is_featured',
})
ARTIFACT_REQUIRED_FIELDS = frozenset({'name', 'category', 'image_urls', 'is_featured'})

COMMENT_SORTS = ('newest', 'oldest', 'likes')
ARTICLE_SORTS = ('newest', 'oldest', 'title', 'views')
ARTIFACT_SORTS = ('newest', 'oldest', 'name', 'category')


def _apply_changes(obj, payload, allowed: frozenset, required: frozenset) -> dict:
    """Copy the fields the client actually sent onto obj, restricted to allowed."""
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if k in allowed}
    if not changes:
        raise ValidationFailed('Please provide at least one field to update')
    nulls = sorted(k for k in changes if k in required and changes[k] is None)
    if nulls:
        raise ValidationFailed(f"Fields cannot be null: {', '.join(nulls)}")
    for field, value in changes.items():
        setattr(obj, field, value)
    return changes


def _author(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'first_name': user.first_name,
        'last_name': user.last_name,
    }


def slugify(title: str) -> str:
    slug = re.sub(r'[^a-z0-9\s-]', '', title.lower())
    slug = re.sub(r'\s+', '-', slug.strip())
    slug = re.sub(r'-+', '-', slug).strip('-')
    return slug or f'article-{uuid.uuid4().hex[:8]}'


# users

@storage_operation
async def create_user(payload):
    async with AsyncSessionLocal() as session:
        taken = await session.execute(
            select(User.username, User.email).where(
                or_(User.username == payload.username, func.lower(User.email) == payload.email.lower())
            )
        )
        for username, _email in taken.all():
            if username == payload.username:
                raise ValidationFailed('Username already exists')
            raise ValidationFailed('Email already exists')
        user = User(
            username=payload.username,
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            locale=payload.locale,
            role=Role.USER.value,
        )
        session.add(user)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ValidationFailed('Username or email already exists') from e
        await session.refresh(user)
        return user


@storage_operation
async def authenticate_user(login: str, password: str):
    async with AsyncSessionLocal() as session:
        q = await session.execute(
            select(User).where(or_(User.username == login, User.email == login.lower()))
        )
        user = q.scalars().first()
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredential('Invalid credentials')
        if not user.is_active:
            raise InvalidCredential('Your account has been deactivated. Please contact support.')
        return user


@storage_operation
async def change_password(user_id: int, current_password: str, new_password: str):
    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFound('User not found')
        if not verify_password(current_password, user.password_hash):
            raise ValidationFailed('Invalid current password')
        user.password_hash = hash_password(new_password)
        await session.commit()


@storage_operation
async def get_user_by_id(user_id: int):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id == user_id))
        return q.scalars().first()


@storage_operation
async def update_user_admin_fields(user_id: int, **fields):
    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFound('User not found')
        for field, value in fields.items():
            setattr(user, field, value)
        await session.commit()
        await session.refresh(user)
        return user


# articles

def _article_order(sort: str):
    if sort == 'oldest':
        return (Article.published_at.asc(), Article.id.asc())
    if sort == 'title':
        return (Article.title.asc(), Article.id.asc())
    if sort == 'views':
        return (Article.view_count.desc(), Article.id.desc())
    return (Article.published_at.desc(), Article.id.desc())


@storage_operation
async def list_articles(page: int, limit: int, sort: str = 'newest',
                        author_id: Optional[int] = None, search: Optional[str] = None):
    async with AsyncSessionLocal() as session:
        conditions = [Article.status == ArticleStatus.PUBLISHED.value]
        if author_id is not None:
            conditions.append(Article.author_id == author_id)
        if search:
            pattern = f'%{search}%'
            conditions.append(or_(
                Article.title.ilike(pattern),
                Article.content.ilike(pattern),
                Article.excerpt.ilike(pattern),
            ))
        total = await session.scalar(select(func.count(Article.id)).where(*conditions))
        res = await session.execute(
            select(Article, User)
            .join(User, User.id == Article.author_id)
            .where(*conditions)
            .order_by(*_article_order(sort))
            .limit(limit)
            .offset((page - 1) * limit)
        )
        articles = []
        for article, author in res.all():
            item = {c.name: getattr(article, c.name) for c in Article.__table__.columns}
            item['author'] = _author(author)
            articles.append(item)
        return articles, total


@storage_operation
async def get_published_article(slug: str):
    """Fetch a published article by slug and count the view."""
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(Article, User)
            .join(User, User.id == Article.author_id)
            .where(Article.slug == slug, Article.status == ArticleStatus.PUBLISHED.value)
        )
        row = res.first()
        if row is None:
            raise NotFound('The requested article does not exist or is not published')
        article, author = row
        await session.execute(
            update(Article).where(Article.id == article.id).values(view_count=Article.view_count + 1)
        )
        await session.commit()
        await session.refresh(article)
        item = {c.name: getattr(article, c.name) for c in Article.__table__.columns}
        item['author'] = _author(author)
        item['comments_count'] = article.comment_count
        return item


@storage_operation
async def create_article(payload, actor: User):
    async with AsyncSessionLocal() as session:
        slug = slugify(payload.title)
        exists = await session.scalar(select(Article.id).where(Article.slug == slug))
        if exists is not None:
            raise ValidationFailed('An article with this title already exists. Please choose a different title.')
        article = Article(
            title=payload.title,
            slug=slug,
            content=payload.content,
            excerpt=payload.excerpt,
            featured_image_url=payload.featured_image_url,
            tags=list(payload.tags),
            author_id=actor.id,
            status=ArticleStatus.DRAFT.value,
        )
        session.add(article)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ValidationFailed('Slug already exists') from e
        await session.refresh(article)
        return article


@storage_operation
async def update_article(article_id: int, payload, actor: User):
    async with AsyncSessionLocal() as session:
        article = await session.get(Article, article_id)
        if article is None:
            raise NotFound('Article not found')
        ensure_owner_or_admin(article.author_id, actor)
        changes = _apply_changes(article, payload, ARTICLE_MUTABLE_FIELDS, ARTICLE_REQUIRED_FIELDS)
        if 'status' in changes:
            article.status = ArticleStatus(changes['status']).value
            if article.status == ArticleStatus.PUBLISHED.value:
                article.published_at = datetime.now(timezone.utc)
        await session.commit()
        await session.refresh(article)
        return article


@storage_operation
async def delete_article(article_id: int, actor: User):
    async with AsyncSessionLocal() as session:
        article = await session.get(Article, article_id)
        if article is None:
            raise NotFound('Article not found')
        ensure_owner_or_admin(article.author_id, actor)
        comment_ids = select(Comment.id).where(Comment.article_id == article_id)
        await session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
        # replies first so the self-reference never dangles
        await session.execute(delete(Comment).where(Comment.article_id == article_id, Comment.parent_id.is_not(None)))
        await session.execute(delete(Comment).where(Comment.article_id == article_id))
        await session.delete(article)
        await session.commit()


@storage_operation
async def list_drafts(actor: User):
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(Article)
            .where(Article.author_id == actor.id, Article.status == ArticleStatus.DRAFT.value)
            .order_by(Article.updated_at.desc(), Article.id.desc())
        )
        return res.scalars().all()


# comments

def _likes_count(target):
    return (
        select(func.count(CommentLike.id))
        .where(CommentLike.comment_id == target.id)
        .correlate(target)
        .scalar_subquery()
    )


def _thread_item(comment: Comment, author: User, likes_count: int) -> dict:
    return {
        'id': comment.id,
        'content': comment.content,
        'created_at': comment.created_at,
        'updated_at': comment.updated_at,
        'author': _author(author),
        'likes_count': int(likes_count or 0),
    }


def _comment_item(comment: Comment, author: User) -> dict:
    return {
        'id': comment.id,
        'content': comment.content,
        'article_id': comment.article_id,
        'parent_id': comment.parent_id,
        'is_approved': comment.is_approved,
        'created_at': comment.created_at,
        'updated_at': comment.updated_at,
        'author': _author(author),
    }


async def _adjust_comment_count(session, article_id: int, delta: int):
    if delta:
        await session.execute(
            update(Article).where(Article.id == article_id).values(comment_count=Article.comment_count + delta)
        )


@storage_operation
async def list_comments(article_id: int, page: int = 1, limit: int = 20, sort: str = 'newest'):
    """Approved top-level comments of a published article, each with its approved replies.

    Returns ``(threads, total)`` where total counts approved top-level comments.
    """
    async with AsyncSessionLocal() as session:
        published = await session.scalar(
            select(Article.id).where(Article.id == article_id, Article.status == ArticleStatus.PUBLISHED.value)
        )
        if published is None:
            raise NotFound('The requested article does not exist or is not published')

        visible = (
            Comment.article_id == article_id,
            Comment.parent_id.is_(None),
            Comment.is_approved.is_(True),
        )
        total = await session.scalar(select(func.count(Comment.id)).where(*visible))

        Reply = aliased(Comment)
        likes = _likes_count(Comment).label('likes_count')
        replies_count = (
            select(func.count(Reply.id))
            .where(Reply.parent_id == Comment.id, Reply.is_approved.is_(True))
            .correlate(Comment)
            .scalar_subquery()
            .label('replies_count')
        )
        if sort == 'oldest':
            order = (Comment.created_at.asc(), Comment.id.asc())
        elif sort == 'likes':
            order = (likes.desc(), Comment.created_at.desc(), Comment.id.desc())
        else:
            order = (Comment.created_at.desc(), Comment.id.desc())

        res = await session.execute(
            select(Comment, User, likes, replies_count)
            .join(User, User.id == Comment.user_id)
            .where(*visible)
            .order_by(*order)
            .limit(limit)
            .offset((page - 1) * limit)
        )
        rows = res.all()
        if not rows:
            return [], total

        parent_ids = [row[0].id for row in rows]
        reply_likes = _likes_count(Comment).label('likes_count')
        reply_res = await session.execute(
            select(Comment, User, reply_likes)
            .join(User, User.id == Comment.user_id)
            .where(Comment.parent_id.in_(parent_ids), Comment.is_approved.is_(True))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        replies = defaultdict(list)
        for reply, author, reply_like_count in reply_res.all():
            replies[reply.parent_id].append(_thread_item(reply, author, reply_like_count))

        threads = []
        for comment, author, like_count, reply_count in rows:
            item = _thread_item(comment, author, like_count)
            item['replies_count'] = int(reply_count or 0)
            item['replies'] = replies.get(comment.id, [])
            threads.append(item)
        return threads, total


@storage_operation
async def create_comment(actor: User, article_id: int, content: str, parent_id: Optional[int] = None):
    async with AsyncSessionLocal() as session:
        published = await session.scalar(
            select(Article.id).where(Article.id == article_id, Article.status == ArticleStatus.PUBLISHED.value)
        )
        if published is None:
            raise NotFound('The article you are trying to comment on does not exist or is not published')
        if parent_id is not None:
            parent = await session.scalar(
                select(Comment).where(
                    Comment.id == parent_id,
                    Comment.article_id == article_id,
                    Comment.is_approved.is_(True),
                )
            )
            if parent is None:
                raise NotFound('The comment you are trying to reply to does not exist')
            if parent.parent_id is not None:
                raise ValidationFailed('Replies can only be made to top-level comments')

        approved = actor.is_admin
        comment = Comment(
            article_id=article_id,
            user_id=actor.id,
            parent_id=parent_id,
            content=content,
            is_approved=approved,
        )
        session.add(comment)
        if approved:
            await _adjust_comment_count(session, article_id, 1)
        await session.commit()
        await session.refresh(comment)
        core.COMMENTS_CREATED.labels(approved=str(approved).lower()).inc()
        logger.info({'msg': 'comment_created', 'comment_id': comment.id, 'article_id': article_id,
                     'user_id': actor.id, 'approved': approved})
        return _comment_item(comment, actor)


@storage_operation
async def update_comment(comment_id: int, content: str, actor: User):
    async with AsyncSessionLocal() as session:
        comment = await session.get(Comment, comment_id)
        if comment is None:
            raise NotFound('The comment you are trying to update does not exist')
        ensure_owner_or_admin(comment.user_id, actor)
        comment.content = content
        await session.commit()
        await session.refresh(comment)
        author = actor if comment.user_id == actor.id else await session.get(User, comment.user_id)
        return _comment_item(comment, author)


@storage_operation
async def delete_comment(comment_id: int, actor: User):
    """Delete a comment together with its direct replies and all of their likes."""
    async with AsyncSessionLocal() as session:
        comment = await session.get(Comment, comment_id)
        if comment is None:
            raise NotFound('The comment you are trying to delete does not exist')
        ensure_owner_or_admin(comment.user_id, actor)

        res = await session.execute(
            select(Comment.id, Comment.is_approved).where(Comment.parent_id == comment.id)
        )
        replies = res.all()
        doomed = [comment.id] + [r.id for r in replies]
        approved_removed = int(bool(comment.is_approved)) + sum(1 for r in replies if r.is_approved)

        await session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(doomed)))
        await session.execute(delete(Comment).where(Comment.parent_id == comment.id))
        await session.execute(delete(Comment).where(Comment.id == comment.id))
        await _adjust_comment_count(session, comment.article_id, -approved_removed)
        await session.commit()
        logger.info({'msg': 'comment_deleted', 'comment_id': comment_id, 'replies_removed': len(replies),
                     'user_id': actor.id})


@storage_operation
async def toggle_comment_like(comment_id: int, actor: User):
    """Flip the actor's like on an approved comment. Returns (liked, likes_count)."""
    async with AsyncSessionLocal() as session:
        approved = await session.scalar(
            select(Comment.id).where(Comment.id == comment_id, Comment.is_approved.is_(True))
        )
        if approved is None:
            raise NotFound('The comment you are trying to like does not exist')

        removed = await session.execute(
            delete(CommentLike).where(CommentLike.comment_id == comment_id, CommentLike.user_id == actor.id)
        )
        if removed.rowcount:
            liked = False
            await session.commit()
        else:
            liked = True
            session.add(CommentLike(comment_id=comment_id, user_id=actor.id))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # a concurrent toggle may have inserted the same like first;
                # anything else (comment or user gone) leaves no row behind
                existing = await session.scalar(
                    select(CommentLike.id).where(
                        CommentLike.comment_id == comment_id, CommentLike.user_id == actor.id
                    )
                )
                if existing is None:
                    raise NotFound('The comment you are trying to like does not exist')

        count = await session.scalar(
            select(func.count(CommentLike.id)).where(CommentLike.comment_id == comment_id)
        )
        core.COMMENT_LIKE_TOGGLES.labels(result='liked' if liked else 'unliked').inc()
        logger.info({'msg': 'comment_like_toggled', 'comment_id': comment_id, 'user_id': actor.id, 'liked': liked})
        return liked, count


@storage_operation
async def approve_comment(comment_id: int, actor: User):
    async with AsyncSessionLocal() as session:
        comment = await session.get(Comment, comment_id)
        if comment is None:
            raise NotFound('The comment you are trying to approve does not exist')
        if not comment.is_approved:
            comment.is_approved = True
            await _adjust_comment_count(session, comment.article_id, 1)
            await session.commit()
            core.COMMENTS_APPROVED.inc()
            logger.info({'msg': 'comment_approved', 'comment_id': comment_id, 'moderator_id': actor.id})
        return {'id': comment.id, 'is_approved': True}


@storage_operation
async def list_pending_comments():
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(Comment, User, Article)
            .join(User, User.id == Comment.user_id)
            .join(Article, Article.id == Comment.article_id)
            .where(Comment.is_approved.is_(False))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        pending = []
        for comment, author, article in res.all():
            pending.append({
                'id': comment.id,
                'content': comment.content,
                'parent_id': comment.parent_id,
                'created_at': comment.created_at,
                'author': _author(author),
                'article': {'id': article.id, 'title': article.title, 'slug': article.slug},
            })
        return pending


# artifacts

def _artifact_order(sort: str):
    if sort == 'oldest':
        return (Artifact.created_at.asc(), Artifact.id.asc())
    if sort == 'name':
        return (Artifact.name.asc(), Artifact.id.asc())
    if sort == 'category':
        return (Artifact.category.asc(), Artifact.created_at.desc(), Artifact.id.desc())
    return (Artifact.created_at.desc(), Artifact.id.desc())


@storage_operation
async def list_artifacts(page: int, limit: int, sort: str = 'newest', category: Optional[str] = None,
                         period: Optional[str] = None, search: Optional[str] = None):
    async with AsyncSessionLocal() as session:
        conditions = []
        if category:
            conditions.append(Artifact.category == category)
        if period:
            conditions.append(Artifact.period == period)
        if search:
            pattern = f'%{search}%'
            conditions.append(or_(Artifact.name.ilike(pattern), Artifact.description.ilike(pattern)))
        total = await session.scalar(select(func.count(Artifact.id)).where(*conditions))
        res = await session.execute(
            select(Artifact)
            .where(*conditions)
            .order_by(*_artifact_order(sort))
            .limit(limit)
            .offset((page - 1) * limit)
        )
        return res.scalars().all(), total


@storage_operation
async def distinct_artifact_values(column: str):
    attr = {'category': Artifact.category, 'period': Artifact.period}[column]
    async with AsyncSessionLocal() as session:
        res = await session.execute(select(attr).where(attr.is_not(None)).distinct().order_by(attr))
        return list(res.scalars().all())


@storage_operation
async def get_artifact(artifact_id: int):
    async with AsyncSessionLocal() as session:
        artifact = await session.get(Artifact, artifact_id)
        if artifact is None:
            raise NotFound('The requested artifact does not exist')
        return artifact


@storage_operation
async def create_artifact(payload, actor: User):
    async with AsyncSessionLocal() as session:
        artifact = Artifact(**payload.model_dump(), donor_id=actor.id)
        session.add(artifact)
        await session.commit()
        await session.refresh(artifact)
        return artifact


@storage_operation
async def update_artifact(artifact_id: int, payload, actor: User):
    async with AsyncSessionLocal() as session:
        artifact = await session.get(Artifact, artifact_id)
        if artifact is None:
            raise NotFound('The artifact you are trying to update does not exist')
        ensure_owner_or_admin(artifact.donor_id, actor)
        _apply_changes(artifact, payload, ARTIFACT_MUTABLE_FIELDS, ARTIFACT_REQUIRED_FIELDS)
        await session.commit()
        await session.refresh(artifact)
        return artifact


@storage_operation
async def delete_artifact(artifact_id: int, actor: User):
    async with AsyncSessionLocal() as session:
        artifact = await session.get(Artifact, artifact_id)
        if artifact is None:
            raise NotFound('The artifact you are trying to delete does not exist')
        ensure_owner_or_admin(artifact.donor_id, actor)
        await session.delete(artifact)
        await session.commit()

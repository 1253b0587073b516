"""
Post persistence: create, patch, delete and the filtered search.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, distinct, func, or_, select
from sqlalchemy.orm import Session, selectinload

from blogcms.config import settings
from blogcms.exceptions import NotFoundError, ValidationError
from blogcms.models import Comment, Post, Tag, User, post_tags, utcnow
from blogcms.services.html_sanitizer import extract_text, sanitize_html
from blogcms.services.tags import collect_unused_tags, list_live_tags, resolve_tags

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


@dataclass
class PostFilter:
    """Search criteria for list_posts. Empty lists mean no constraint."""
    author_names: Optional[List[str]] = None
    tag_ids: Optional[List[int]] = None
    search: str = ""
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    page: int = 0
    size: int = 10
    direction: str = "DESC"


@dataclass
class PostPage:
    items: List[Post] = field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def has_more(self) -> bool:
        return (self.page + 1) * self.size < self.total


def make_excerpt(content: Optional[str], sentences: Optional[int] = None) -> str:
    """First `sentences` sentences of the plain text of `content`."""
    if sentences is None:
        sentences = settings.excerpt_sentences
    text = extract_text(content)
    if not text:
        return ""
    return " ".join(SENTENCE_BOUNDARY.split(text)[:sentences]).strip()


def sanitize_author_names(author_names: Optional[List[str]]) -> Optional[List[str]]:
    if not author_names:
        return None
    cleaned = []
    for name in author_names:
        if name is None:
            continue
        name = name.strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned or None


def sanitize_tag_ids(tag_ids: Optional[List[int]]) -> Optional[List[int]]:
    if not tag_ids:
        return None
    cleaned = []
    for tag_id in tag_ids:
        if tag_id is not None and tag_id not in cleaned:
            cleaned.append(tag_id)
    return cleaned or None


def resolve_date_range(
    from_date: Optional[date], to_date: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn calendar days into a half-open [start, end) datetime range.
    to_date covers its whole day.
    """
    start = datetime.combine(from_date, time.min) if from_date else None
    end = datetime.combine(to_date + timedelta(days=1), time.min) if to_date else None
    return start, end


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _text_condition(search: str):
    pattern = f"%{_escape_like(search)}%"

    def like(column):
        return column.ilike(pattern, escape="\\")

    return or_(
        like(Post.title),
        like(Post.content),
        like(Post.excerpt),
        like(User.name),
        Post.tags.any(and_(like(Tag.name), Tag.is_deleted == False)),
        Post.comments.any(and_(like(Comment.content), Comment.is_deleted == False)),
    )


def _tag_intersection(tag_ids: List[int]):
    """Ids of posts carrying every tag in tag_ids."""
    return (
        select(post_tags.c.post_id)
        .where(post_tags.c.tag_id.in_(tag_ids))
        .group_by(post_tags.c.post_id)
        .having(func.count(distinct(post_tags.c.tag_id)) == len(tag_ids))
    )


def list_posts(db: Session, filters: PostFilter) -> PostPage:
    """
    Filtered, sorted and paginated post listing.

    All supplied filters are combined with AND:
    - author name in author_names
    - post carries every tag in tag_ids
    - search matches title, content, excerpt, author, a tag or a comment
    - published_at in [from_date, to_date + 1 day)
    """
    author_names = sanitize_author_names(filters.author_names)
    tag_ids = sanitize_tag_ids(filters.tag_ids)
    search = (filters.search or "").strip()
    start, end = resolve_date_range(filters.from_date, filters.to_date)

    query = db.query(Post).join(Post.author).filter(Post.is_deleted == False)

    if author_names:
        query = query.filter(User.name.in_(author_names))
    if tag_ids:
        query = query.filter(Post.id.in_(_tag_intersection(tag_ids)))
    if search:
        query = query.filter(_text_condition(search))
    if start is not None:
        query = query.filter(Post.published_at >= start)
    if end is not None:
        query = query.filter(Post.published_at < end)

    total = query.count()

    if filters.direction.upper() == "ASC":
        ordering = (Post.published_at.asc(), Post.id.asc())
    else:
        ordering = (Post.published_at.desc(), Post.id.desc())

    items = (
        query
        .options(selectinload(Post.tags), selectinload(Post.comments), selectinload(Post.author))
        .order_by(*ordering)
        .offset(filters.page * filters.size)
        .limit(filters.size)
        .all()
    )

    logger.debug(
        f"Post search authors={author_names} tags={tag_ids} search='{search}' "
        f"range=[{start}, {end}) -> {total} matches"
    )
    return PostPage(items=items, total=total, page=filters.page, size=filters.size)


def get_filter_options(db: Session) -> Tuple[List[str], List[Tag]]:
    """Distinct author names of live posts and all live tags."""
    authors = [
        name for (name,) in (
            db.query(User.name)
            .join(Post, Post.author_id == User.id)
            .filter(Post.is_deleted == False)
            .distinct()
            .order_by(User.name)
            .all()
        )
    ]
    return authors, list_live_tags(db)


def get_post(db: Session, post_id: int) -> Post:
    post = (
        db.query(Post)
        .filter(Post.id == post_id, Post.is_deleted == False)
        .first()
    )
    if not post:
        raise NotFoundError(f"Post {post_id} not found")
    return post


def _apply_content(post: Post, content: str):
    post.content = sanitize_html(content)
    post.excerpt = make_excerpt(post.content)


def create_post(
    db: Session,
    author: Optional[User],
    title: str,
    content: str,
    tag_list: Optional[str] = None,
    published_at: Optional[datetime] = None,
) -> Post:
    """
    Create a post with its tags.
    Don't commit here - let the caller handle the transaction.
    """
    if author is None:
        raise ValidationError("Author must be set before saving the post")

    tags = resolve_tags(db, tag_list)
    post = Post(title=title, author=author, tags=tags)
    _apply_content(post, content)
    post.published_at = published_at or utcnow()
    post.is_published = True

    db.add(post)
    db.flush()
    logger.info(f"Created post {post.id} by user {author.id} with {len(post.tags)} tags")
    return post


def update_post(
    db: Session,
    post: Post,
    title: Optional[str] = None,
    content: Optional[str] = None,
    tag_list: Optional[str] = None,
    author: Optional[User] = None,
) -> Post:
    """
    Partially update a post. Fields left as None are unchanged.

    When tag_list is given the tag set is replaced and tags only the
    old set referenced are garbage-collected in the same transaction.
    """
    old_tags = list(post.tags)
    new_tags = resolve_tags(db, tag_list) if tag_list is not None else None

    if title is not None:
        post.title = title
    if content is not None:
        _apply_content(post, content)
    if author is not None:
        post.author = author

    if new_tags is not None:
        post.tags = new_tags
    db.flush()

    if new_tags is not None:
        collect_unused_tags(db, old_tags)

    logger.info(f"Updated post {post.id}")
    return post


def delete_post(db: Session, post: Post):
    """
    Soft-delete a post, its comments, and tags left without a live post.
    """
    post.is_deleted = True
    for comment in post.comments:
        comment.is_deleted = True
    db.flush()

    collect_unused_tags(db, post.tags)
    logger.info(f"Deleted post {post.id}")

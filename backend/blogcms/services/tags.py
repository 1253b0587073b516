"""
Tag management for posts.
Parses free-text tag lists, reuses or creates tags by name and
garbage-collects tags no live post references any more.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.models import Post, Tag, post_tags

logger = logging.getLogger(__name__)


def parse_tag_names(tag_list: Optional[str]) -> List[str]:
    """
    Split a comma-separated tag list into normalized names.

    Segments are trimmed and lower-cased; empty segments and repeats
    are dropped, first occurrence wins.
    """
    if not tag_list:
        return []

    names = []
    seen = set()
    for raw in tag_list.split(","):
        name = raw.strip().lower()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


def _find_tag_by_name(db: Session, name: str) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.name == name).first()


def get_or_create_tag(db: Session, name: str) -> Tag:
    """
    Return the tag called `name`, creating it if needed.

    A soft-deleted tag with the same name is revived. If another
    transaction inserts the same name first, the unique constraint
    fires inside our savepoint and we read the winner's row instead.
    """
    tag = _find_tag_by_name(db, name)
    if tag is None:
        try:
            with db.begin_nested():
                tag = Tag(name=name)
                db.add(tag)
                db.flush()
            logger.debug(f"Created tag '{name}'")
        except IntegrityError:
            logger.info(f"Tag '{name}' created concurrently, reusing existing row")
            tag = _find_tag_by_name(db, name)
            if tag is None:
                raise

    if tag.is_deleted:
        tag.is_deleted = False
        logger.debug(f"Revived tag '{name}'")

    return tag


def resolve_tags(db: Session, tag_list: Optional[str]) -> List[Tag]:
    """Map a raw tag list to persisted Tag rows."""
    return [get_or_create_tag(db, name) for name in parse_tag_names(tag_list)]


def count_live_posts(db: Session, tag_id: int) -> int:
    """Count non-deleted posts referencing a tag."""
    return (
        db.query(func.count(Post.id))
        .join(post_tags, post_tags.c.post_id == Post.id)
        .filter(post_tags.c.tag_id == tag_id, Post.is_deleted == False)
        .scalar()
    )


def collect_unused_tags(db: Session, tags: Iterable[Tag]) -> List[Tag]:
    """
    Flag as deleted every tag in `tags` with no live post left.

    The change that detached the tags must already be flushed.
    Don't commit here - let the caller handle the transaction.

    Returns:
        The tags that were collected
    """
    collected = []
    for tag in tags:
        if tag.is_deleted:
            continue
        if count_live_posts(db, tag.id) == 0:
            tag.is_deleted = True
            collected.append(tag)

    if collected:
        logger.info(f"Collected unused tags: {', '.join(t.name for t in collected)}")
    return collected


def list_live_tags(db: Session) -> List[Tag]:
    """All non-deleted tags sorted by name."""
    return db.query(Tag).filter(Tag.is_deleted == False).order_by(Tag.name).all()

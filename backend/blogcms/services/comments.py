"""
Comments attached to posts.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from blogcms.exceptions import NotFoundError, ValidationError
from blogcms.models import Comment, Post, User
from blogcms.services.html_sanitizer import extract_text

logger = logging.getLogger(__name__)


def list_comments(db: Session, post: Post) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.post_id == post.id, Comment.is_deleted == False)
        .order_by(Comment.created_at, Comment.id)
        .all()
    )


def get_comment(db: Session, post: Post, comment_id: int) -> Comment:
    """Fetch a live comment, which must belong to `post`."""
    comment = (
        db.query(Comment)
        .filter(
            Comment.id == comment_id,
            Comment.post_id == post.id,
            Comment.is_deleted == False,
        )
        .first()
    )
    if not comment:
        raise NotFoundError(f"Comment {comment_id} not found for post {post.id}")
    return comment


def _clean_content(content: Optional[str]) -> str:
    text = extract_text(content)
    if not text:
        raise ValidationError("Comment content must not be empty")
    return text


def create_comment(
    db: Session,
    post: Post,
    content: str,
    writer_name: Optional[str] = None,
    email: Optional[str] = None,
    user: Optional[User] = None,
) -> Comment:
    """
    Add a comment to a post.

    Authenticated callers comment under their own name and email;
    anonymous callers must supply both.
    """
    if user is not None:
        writer_name = user.name
        email = user.email
    else:
        writer_name = (writer_name or "").strip()
        email = (email or "").strip()
        if not writer_name or not email:
            raise ValidationError("Name and email are required to comment")

    comment = Comment(
        post=post,
        user=user,
        writer_name=writer_name,
        email=email,
        content=_clean_content(content),
    )
    db.add(comment)
    db.flush()
    logger.info(f"Comment {comment.id} added to post {post.id}")
    return comment


def update_comment(db: Session, comment: Comment, content: str) -> Comment:
    """Only the content of a comment can change."""
    comment.content = _clean_content(content)
    db.flush()
    return comment


def delete_comment(db: Session, comment: Comment):
    comment.is_deleted = True
    db.flush()
    logger.info(f"Deleted comment {comment.id} of post {comment.post_id}")

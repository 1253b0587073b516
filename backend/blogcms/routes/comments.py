"""
Comment routes, nested under a post.
Anyone may comment; only the post's author or an admin may edit or delete.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from blogcms.database import get_db
from blogcms.dependencies import get_current_user, get_optional_user, require_post_manager
from blogcms.models import User
from blogcms.schemas import CommentCreate, CommentResponse, CommentUpdate
from blogcms.services import comments as comment_service
from blogcms.services.posts import get_post

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.get("", response_model=List[CommentResponse])
def list_comments(post_id: int, db: Session = Depends(get_db)):
    """List the comments of a post, oldest first."""
    post = get_post(db, post_id)
    return comment_service.list_comments(db, post)


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(post_id: int, comment_id: int, db: Session = Depends(get_db)):
    post = get_post(db, post_id)
    return comment_service.get_comment(db, post, comment_id)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: int,
    request: CommentCreate,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """
    Add a comment.
    Signed-in callers comment as themselves; anonymous callers
    must provide writer_name and email.
    """
    post = get_post(db, post_id)
    comment = comment_service.create_comment(
        db,
        post,
        content=request.content,
        writer_name=request.writer_name,
        email=request.email,
        user=user,
    )
    db.commit()
    db.refresh(comment)
    return comment


@router.patch("/{comment_id}", response_model=CommentResponse)
def update_comment(
    post_id: int,
    comment_id: int,
    request: CommentUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Edit the content of a comment."""
    post = get_post(db, post_id)
    require_post_manager(user, post, "manage comments for this post")

    comment = comment_service.get_comment(db, post, comment_id)
    comment_service.update_comment(db, comment, request.content)
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    post_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = get_post(db, post_id)
    require_post_manager(user, post, "manage comments for this post")

    comment = comment_service.get_comment(db, post, comment_id)
    comment_service.delete_comment(db, comment)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

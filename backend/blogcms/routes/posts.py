"""
Post routes.
Filtered listing, reading, and author/admin-gated writes.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.database import get_db
from blogcms.dependencies import get_current_user, require_post_manager
from blogcms.exceptions import ForbiddenError
from blogcms.models import Post, User
from blogcms.schemas import (
    AuthorResponse,
    CommentResponse,
    FilterOptionsResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
    TagResponse,
)
from blogcms.services import posts as post_service
from blogcms.services.posts import PostFilter
from blogcms.services.users import get_user

router = APIRouter(prefix="/posts", tags=["posts"])


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        excerpt=post.excerpt,
        content=post.content,
        tags=[TagResponse.model_validate(tag) for tag in post.tags],
        author=AuthorResponse.model_validate(post.author),
        comments=[CommentResponse.model_validate(c) for c in post.live_comments],
        published_at=post.published_at,
        is_published=bool(post.is_published),
    )


@router.get("", response_model=PostListResponse)
def list_posts(
    author_id: Optional[int] = Query(None, alias="authorId", description="Filter by author id"),
    author_names: Optional[List[str]] = Query(None, alias="authorNames", description="Filter by author names"),
    tag_id: Optional[List[int]] = Query(None, alias="tagId", description="Posts must carry every tag"),
    tag_ids: Optional[List[int]] = Query(None, alias="tagIds", description="Same as tagId"),
    search: str = Query("", description="Case-insensitive text search"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate", description="Inclusive"),
    page: int = Query(0, ge=0, description="Page index, 0-based"),
    size: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    start: Optional[int] = Query(None, ge=1, description="1-based position of the first post"),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    direction: Optional[str] = Query(None, description="ASC or DESC by publish time"),
    order: Optional[str] = Query(None, description="Alias of direction"),
    db: Session = Depends(get_db),
):
    """
    List posts with filters and pagination.
    Ordered by published_at DESC unless ASC is requested.
    """
    page_size = limit or size or settings.default_page_size
    if start is not None:
        page = (start - 1) // page_size

    names = list(author_names or [])
    if author_id is not None:
        names.append(get_user(db, author_id).name)

    sort_direction = (direction or order or "DESC").upper()
    if sort_direction != "ASC":
        sort_direction = "DESC"

    result = post_service.list_posts(
        db,
        PostFilter(
            author_names=names,
            tag_ids=list(tag_id or []) + list(tag_ids or []),
            search=search,
            from_date=from_date,
            to_date=to_date,
            page=page,
            size=page_size,
            direction=sort_direction,
        ),
    )

    return PostListResponse(
        posts=[to_post_response(p) for p in result.items],
        total=result.total,
        page=result.page,
        size=result.size,
        total_pages=result.total_pages,
        has_more=result.has_more,
    )


@router.get("/filters", response_model=FilterOptionsResponse)
def get_filter_options(db: Session = Depends(get_db)):
    """Authors and tags available for filtering."""
    authors, tags = post_service.get_filter_options(db)
    return FilterOptionsResponse(
        authors=authors,
        tags=[TagResponse.model_validate(t) for t in tags],
    )


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, db: Session = Depends(get_db)):
    """Fetch a post by ID."""
    return to_post_response(post_service.get_post(db, post_id))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    request: PostCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Create a post authored by the caller.
    Admins may publish on behalf of another user via author_id.
    """
    author = user
    if user.is_admin and request.author_id is not None:
        author = get_user(db, request.author_id)

    post = post_service.create_post(
        db,
        author=author,
        title=request.title,
        content=request.content,
        tag_list=request.tag_list,
    )
    db.commit()
    db.refresh(post)
    return to_post_response(post)


@router.patch("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    request: PostUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Partially update a post.
    Only admins and the post's author may edit; only admins may reassign it.
    """
    post = post_service.get_post(db, post_id)
    require_post_manager(user, post)

    new_author = None
    if request.author_id is not None and request.author_id != post.author_id:
        if not user.is_admin:
            raise ForbiddenError("Only admins can change the author of a post")
        new_author = get_user(db, request.author_id)

    post_service.update_post(
        db,
        post,
        title=request.title,
        content=request.content,
        tag_list=request.tag_list,
        author=new_author,
    )
    db.commit()
    db.refresh(post)
    return to_post_response(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Delete a post with its comments; tags left unused are collected.
    """
    post = post_service.get_post(db, post_id)
    require_post_manager(user, post, "delete this post")

    post_service.delete_post(db, post)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

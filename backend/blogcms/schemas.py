"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List

from blogcms.models import Role


# === Authentication ===

class RegisterRequest(BaseModel):
    """Sign-up request"""
    name: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    """Login request"""
    email: str
    password: str


class UserInfo(BaseModel):
    """Authenticated user"""
    id: int
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Login response with JWT token"""
    token: str
    expires_at: datetime
    user: UserInfo


# === Tags ===

class TagResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


# === Comments ===

class CommentCreate(BaseModel):
    """New comment; writer fields are ignored for authenticated callers"""
    content: str
    writer_name: Optional[str] = None
    email: Optional[str] = None


class CommentUpdate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: int
    content: str
    writer_name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# === Posts ===

class AuthorResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class PostCreate(BaseModel):
    """New post. author_id is honored for admins only."""
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    tag_list: Optional[str] = None
    author_id: Optional[int] = None


class PostUpdate(BaseModel):
    """Partial update; omitted fields stay as they are"""
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    tag_list: Optional[str] = None
    author_id: Optional[int] = None


class PostResponse(BaseModel):
    id: int
    title: str
    excerpt: Optional[str]
    content: str
    tags: List[TagResponse]
    author: AuthorResponse
    comments: List[CommentResponse]
    published_at: Optional[datetime]
    is_published: bool


class PostListResponse(BaseModel):
    """Paginated post listing"""
    posts: List[PostResponse]
    total: int
    page: int
    size: int
    total_pages: int
    has_more: bool


class FilterOptionsResponse(BaseModel):
    """Values available to the listing filters"""
    authors: List[str]
    tags: List[TagResponse]

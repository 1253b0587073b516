"""
ORM models.
Posts, tags, comments and users with a uniform soft-delete flag.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean,
    Enum, ForeignKey, Table, Index
)
from sqlalchemy.orm import relationship

from blogcms.database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way columns store it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    AUTHOR = "AUTHOR"


# Association table: post_id -> tag_id and tag_id -> post_id
post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

Index("idx_post_tags_tag", post_tags.c.tag_id)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.AUTHOR)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    posts = relationship("Post", back_populates="author")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text)  # Derived from content on every save
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    published_at = Column(DateTime)
    is_published = Column(Boolean, default=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    author = relationship("User", back_populates="posts")
    tags = relationship("Tag", secondary=post_tags, order_by="Tag.name")
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="[Comment.created_at, Comment.id]",
    )

    @property
    def live_comments(self):
        return [c for c in self.comments if not c.is_deleted]


Index("idx_posts_published", Post.published_at.desc())
Index("idx_posts_author", Post.author_id)
Index("idx_posts_deleted", Post.is_deleted)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(Text, unique=True, nullable=False)  # lower-cased
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    writer_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    post = relationship("Post", back_populates="comments")
    user = relationship("User")


Index("idx_comments_post", Comment.post_id)


class TokenBlacklist(Base):
    __tablename__ = "token_blacklist"

    jti = Column(Text, primary_key=True)
    expires_at = Column(DateTime, nullable=False)


Index("idx_blacklist_expires", TokenBlacklist.expires_at)

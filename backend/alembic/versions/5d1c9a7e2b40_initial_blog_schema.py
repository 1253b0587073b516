"""initial_blog_schema

Revision ID: 5d1c9a7e2b40
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d1c9a7e2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'AUTHOR', name='user_role'), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.Text()),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('published_at', sa.DateTime()),
        sa.Column('is_published', sa.Boolean()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('idx_posts_published', 'posts', [sa.text('published_at DESC')])
    op.create_index('idx_posts_author', 'posts', ['author_id'])
    op.create_index('idx_posts_deleted', 'posts', ['is_deleted'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime()),
    )

    op.create_table(
        'post_tags',
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_index('idx_post_tags_tag', 'post_tags', ['tag_id'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('writer_name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('idx_comments_post', 'comments', ['post_id'])

    op.create_table(
        'token_blacklist',
        sa.Column('jti', sa.Text(), primary_key=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_blacklist_expires', 'token_blacklist', ['expires_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_blacklist_expires', table_name='token_blacklist')
    op.drop_table('token_blacklist')

    op.drop_index('idx_comments_post', table_name='comments')
    op.drop_table('comments')

    op.drop_index('idx_post_tags_tag', table_name='post_tags')
    op.drop_table('post_tags')

    op.drop_table('tags')

    op.drop_index('idx_posts_deleted', table_name='posts')
    op.drop_index('idx_posts_author', table_name='posts')
    op.drop_index('idx_posts_published', table_name='posts')
    op.drop_table('posts')

    op.drop_table('users')

"""Initial schema - users, posts, sharing and the social graph

Revision ID: 0001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(64), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        *_timestamps(),
    )

    # Pending posts and their authors / outstanding approvals
    op.create_table(
        'pending_posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'pending_post_authors',
        sa.Column('pending_post_id', sa.Uuid(), sa.ForeignKey('pending_posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )
    op.create_table(
        'pending_approvals',
        sa.Column('pending_post_id', sa.Uuid(), sa.ForeignKey('pending_posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
    )

    # Published posts
    op.create_table(
        'posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'post_authors',
        sa.Column('post_id', sa.Uuid(), sa.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )

    # Sharing records (resource_id is intentionally not a foreign key)
    op.create_table(
        'sharing_records',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('scope', sa.String(50), nullable=False),
        sa.Column('resource_id', sa.Uuid(), nullable=False),
        sa.Column('allow_requests', sa.Boolean(), nullable=False, default=False),
        *_timestamps(),
    )
    op.create_index('ix_sharing_records_scope_resource', 'sharing_records', ['scope', 'resource_id'])
    op.create_table(
        'sharing_members',
        sa.Column('record_id', sa.Uuid(), sa.ForeignKey('sharing_records.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('member_id', sa.Uuid(), primary_key=True),
        sa.Column('role', sa.String(20), primary_key=True),
    )
    op.create_index('ix_sharing_members_member_role', 'sharing_members', ['member_id', 'role'])

    # Comments
    op.create_table(
        'comments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('target_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )

    # Friends
    op.create_table(
        'friendships',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user1_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user2_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        *_timestamps(),
        sa.UniqueConstraint('user1_id', 'user2_id', name='uq_friendships_pair'),
    )
    op.create_table(
        'friend_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('from_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('to_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False, default='pending'),
        *_timestamps(),
    )

    # User lists
    op.create_table(
        'user_lists',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_table(
        'user_list_members',
        sa.Column('list_id', sa.Uuid(), sa.ForeignKey('user_lists.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
    )

    # Event log table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_user_time', 'event_logs', ['user_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('event_logs')
    op.drop_table('user_list_members')
    op.drop_table('user_lists')
    op.drop_table('friend_requests')
    op.drop_table('friendships')
    op.drop_table('comments')
    op.drop_table('sharing_members')
    op.drop_table('sharing_records')
    op.drop_table('post_authors')
    op.drop_table('posts')
    op.drop_table('pending_approvals')
    op.drop_table('pending_post_authors')
    op.drop_table('pending_posts')
    op.drop_table('users')

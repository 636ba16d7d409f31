"""Initial schema - users, sections, articles, comments, notifications

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


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, default='user'),
        sa.Column('avatar', sa.String(1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    
    # Section tree
    op.create_table(
        'sections',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
    )
    op.create_table(
        'subsections',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('section_id', sa.String(100), sa.ForeignKey('sections.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
    )
    
    # Section editor grants
    op.create_table(
        'section_editors',
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('section_id', sa.String(100), sa.ForeignKey('sections.id', ondelete='CASCADE'), primary_key=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    
    # Articles table
    op.create_table(
        'articles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, default=''),
        sa.Column('excerpt', sa.Text(), nullable=False, default=''),
        sa.Column('section_id', sa.String(100), nullable=False, index=True),
        sa.Column('subsection_id', sa.String(100), nullable=True, index=True),
        sa.Column('author_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('author_name', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('image_url', sa.String(2048), nullable=True),
        sa.Column('allow_comments', sa.Boolean(), nullable=False, default=True),
        sa.Column('status', sa.String(20), nullable=False, default='published', index=True),
    )
    op.create_index('ix_articles_status_timestamp', 'articles', ['status', 'timestamp'])
    
    op.create_table(
        'article_tags',
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag', sa.String(100), primary_key=True, index=True),
    )
    op.create_table(
        'attachments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('mime_type', sa.String(255), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
    )
    
    # Comments table
    op.create_table(
        'comments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('parent_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('author_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('author_name', sa.String(255), nullable=False),
        sa.Column('author_avatar', sa.String(1024), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
    )
    
    # Notifications and digest preferences
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('article_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, default=False),
    )
    op.create_index('ix_notifications_user_timestamp', 'notifications', ['user_id', 'timestamp'])
    
    op.create_table(
        'digest_preferences',
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, default=False),
        sa.Column('frequency', sa.String(20), nullable=False, default='weekly'),
    )
    
    # Mail transport (single row)
    op.create_table(
        'email_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('provider', sa.String(50), nullable=False, default='smtp'),
        sa.Column('smtp_host', sa.String(255), nullable=False, default=''),
        sa.Column('smtp_port', sa.Integer(), nullable=False, default=587),
        sa.Column('username', sa.String(255), nullable=False, default=''),
        sa.Column('password', sa.String(255), nullable=False, default=''),
        sa.Column('encryption', sa.String(10), nullable=False, default='tls'),
        sa.Column('from_address', sa.String(255), nullable=False, default=''),
        sa.Column('from_name', sa.String(255), nullable=False, default='OTS NEWS'),
        sa.Column('enabled', sa.Boolean(), nullable=False, default=False),
    )
    
    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(100), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])


def downgrade() -> None:
    op.drop_table('event_logs')
    op.drop_table('email_config')
    op.drop_table('digest_preferences')
    op.drop_table('notifications')
    op.drop_table('comments')
    op.drop_table('attachments')
    op.drop_table('article_tags')
    op.drop_table('articles')
    op.drop_table('section_editors')
    op.drop_table('subsections')
    op.drop_table('sections')
    op.drop_table('users')

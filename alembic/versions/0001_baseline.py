"""Baseline migration - full DeskTown schema

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every table of the platform: users and auditing, chat,
notifications and internal email, offices and their storefront,
social feed, statuses, work items and task automations.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _id() -> sa.Column:
    return sa.Column('id', sa.Integer(), autoincrement=True, nullable=False)


def _created_at(name: str = 'created_at') -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _user_fk(column: str, ondelete: str = 'CASCADE') -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint([column], ['users.id'], ondelete=ondelete)


def upgrade() -> None:
    """Create all tables, indexes and constraints."""

    # ==========================================================================
    # Users and admin audit
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.Text(), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('profile_image_url', sa.Text(), nullable=True),
        sa.Column('department', sa.String(100), server_default='General', nullable=False),
        sa.Column('role', sa.String(50), server_default='member', nullable=False),
        sa.Column('status', sa.String(20), server_default='offline', nullable=False),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('token_version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username'),
    )

    op.create_table(
        'admin_audit_logs',
        _id(),
        sa.Column('admin_id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=True),
        sa.Column('entity_id', sa.String(100), nullable=True),
        sa.Column('details', JSON_TYPE, nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('admin_id'),
    )
    op.create_index('idx_admin_audit_created', 'admin_audit_logs', ['created_at'])
    op.create_index('idx_admin_audit_entity', 'admin_audit_logs', ['entity_type', 'entity_id'])

    op.create_table(
        'stored_objects',
        _id(),
        sa.Column('object_path', sa.String(512), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('visibility', sa.String(20), server_default='public', nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('object_path'),
        _user_fk('owner_id'),
    )
    op.create_index('idx_stored_objects_owner', 'stored_objects', ['owner_id'])

    # ==========================================================================
    # Chat
    # ==========================================================================
    op.create_table(
        'chat_threads',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), server_default='group', nullable=True),
        sa.Column('creator_id', sa.Uuid(), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('last_message_id', sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('creator_id', 'SET NULL'),
    )

    op.create_table(
        'chat_participants',
        _id(),
        sa.Column('thread_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('last_read_message_id', sa.Integer(), nullable=True),
        _created_at('joined_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['thread_id'], ['chat_threads.id'], ondelete='CASCADE'),
        _user_fk('user_id'),
        sa.UniqueConstraint('thread_id', 'user_id', name='uq_chat_participant'),
    )
    op.create_index('idx_chat_participants_user', 'chat_participants', ['user_id'])

    op.create_table(
        'messages',
        _id(),
        sa.Column('thread_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(20), server_default='text', nullable=True),
        sa.Column('media_url', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['thread_id'], ['chat_threads.id'], ondelete='CASCADE'),
        _user_fk('sender_id'),
    )
    op.create_index('idx_messages_thread_id', 'messages', ['thread_id', 'id'])

    # ==========================================================================
    # Notifications, push and internal email
    # ==========================================================================
    op.create_table(
        'notifications',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('read', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('data', JSON_TYPE, nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('user_id'),
    )
    op.create_index('idx_notif_user_read', 'notifications', ['user_id', 'read', 'created_at'])

    op.create_table(
        'push_subscriptions',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('endpoint', sa.Text(), nullable=False),
        sa.Column('p256dh', sa.Text(), nullable=False),
        sa.Column('auth', sa.Text(), nullable=False),
        sa.Column('user_agent', sa.String(500), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('endpoint'),
        _user_fk('user_id'),
    )
    op.create_index('idx_push_subscriptions_user', 'push_subscriptions', ['user_id'])

    op.create_table(
        'internal_emails',
        _id(),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('recipient_id', sa.Uuid(), nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('is_starred', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('is_draft', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('parent_email_id', sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('sender_id'),
        _user_fk('recipient_id'),
        sa.ForeignKeyConstraint(['parent_email_id'], ['internal_emails.id'], ondelete='SET NULL'),
    )
    op.create_index(
        'idx_internal_emails_recipient', 'internal_emails', ['recipient_id', 'is_deleted', 'created_at']
    )
    op.create_index('idx_internal_emails_sender', 'internal_emails', ['sender_id', 'created_at'])

    # ==========================================================================
    # Offices
    # ==========================================================================
    op.create_table(
        'offices',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.Text(), nullable=True),
        sa.Column('cover_url', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('category', sa.String(50), server_default='general', nullable=True),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('receptionist_id', sa.Uuid(), nullable=True),
        sa.Column('is_published', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('approval_status', sa.String(20), server_default='pending', nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        sa.Column('working_hours', sa.String(255), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        _user_fk('owner_id'),
        _user_fk('receptionist_id', 'SET NULL'),
    )
    op.create_index('idx_offices_owner', 'offices', ['owner_id'])
    op.create_index('idx_offices_published', 'offices', ['is_published', 'approval_status'])

    op.create_table(
        'company_departments',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_ar', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('manager_id', sa.Uuid(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('manager_id', 'SET NULL'),
    )
    op.create_index('idx_company_departments_office', 'company_departments', ['office_id', 'sort_order'])

    op.create_table(
        'company_sections',
        _id(),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_ar', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('head_id', sa.Uuid(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['department_id'], ['company_departments.id'], ondelete='CASCADE'),
        _user_fk('head_id', 'SET NULL'),
    )
    op.create_index('idx_company_sections_department', 'company_sections', ['department_id', 'sort_order'])

    op.create_table(
        'office_media',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('is_pinned', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('views', sa.Integer(), server_default='0', nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_office_media_office', 'office_media', ['office_id', 'created_at'])

    op.create_table(
        'office_posts',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_type', sa.String(30), nullable=True),
        sa.Column('likes', sa.Integer(), server_default='0', nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('author_id'),
    )
    op.create_index('idx_office_posts_office', 'office_posts', ['office_id', 'created_at'])

    op.create_table(
        'office_messages',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(255), nullable=False),
        sa.Column('sender_type', sa.String(20), nullable=False),
        sa.Column('sender_name', sa.String(255), nullable=True),
        sa.Column('sender_email', sa.String(255), nullable=True),
        sa.Column('sender_id', sa.Uuid(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('sender_id', 'SET NULL'),
    )
    op.create_index(
        'idx_office_messages_session', 'office_messages', ['office_id', 'session_id', 'created_at']
    )

    op.create_table(
        'video_calls',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(255), nullable=False),
        sa.Column('visitor_name', sa.String(255), nullable=True),
        sa.Column('room_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('receptionist_id', sa.Uuid(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('receptionist_id', 'SET NULL'),
    )
    op.create_index('idx_video_calls_office_status', 'video_calls', ['office_id', 'status'])

    op.create_table(
        'office_followers',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('follower_id', sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('follower_id'),
        sa.UniqueConstraint('office_id', 'follower_id', name='uq_office_follower'),
    )

    # ==========================================================================
    # Social feed
    # ==========================================================================
    op.create_table(
        'profiles',
        _id(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('cover_url', sa.Text(), nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id'),
        _user_fk('owner_id'),
    )

    op.create_table(
        'followers',
        _id(),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('follower_user_id', sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        _user_fk('follower_user_id'),
        sa.UniqueConstraint('profile_id', 'follower_user_id', name='uq_profile_follower'),
    )
    op.create_index('idx_followers_user', 'followers', ['follower_user_id'])

    op.create_table(
        'posts',
        _id(),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_type', sa.String(30), nullable=True),
        sa.Column('scope', sa.String(20), server_default='public', nullable=True),
        sa.Column('profile_id', sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('author_id'),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='SET NULL'),
    )
    op.create_index('idx_posts_author_created', 'posts', ['author_id', 'created_at'])

    op.create_table(
        'post_likes',
        _id(),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        _user_fk('user_id'),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_post_like'),
    )

    op.create_table(
        'post_comments',
        _id(),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        _user_fk('author_id'),
    )
    op.create_index('idx_post_comments_post', 'post_comments', ['post_id', 'created_at'])

    # ==========================================================================
    # Statuses (24-hour stories)
    # ==========================================================================
    op.create_table(
        'statuses',
        _id(),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('office_id', sa.Integer(), nullable=True),
        sa.Column('media_url', sa.Text(), nullable=False),
        sa.Column('media_type', sa.String(20), server_default='video', nullable=True),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('author_id'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_statuses_expires', 'statuses', ['expires_at'])

    op.create_table(
        'status_replies',
        _id(),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.id'], ondelete='CASCADE'),
        _user_fk('sender_id'),
    )
    op.create_index('idx_status_replies_status', 'status_replies', ['status_id', 'created_at'])

    op.create_table(
        'status_views',
        _id(),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=False),
        _created_at('viewed_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.id'], ondelete='CASCADE'),
        _user_fk('viewer_id'),
        sa.UniqueConstraint('status_id', 'viewer_id', name='uq_status_view'),
    )

    op.create_table(
        'status_likes',
        _id(),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.id'], ondelete='CASCADE'),
        _user_fk('user_id'),
        sa.UniqueConstraint('status_id', 'user_id', name='uq_status_like'),
    )

    # ==========================================================================
    # Services, feedback, requests, orders and payment events
    # ==========================================================================
    op.create_table(
        'office_services',
        _id(),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('owner_user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_ar', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), server_default='0', nullable=False),
        sa.Column('currency', sa.String(3), server_default='SAR', nullable=True),
        sa.Column('price_type', sa.String(20), server_default='fixed', nullable=True),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('share_token', sa.String(64), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('is_featured', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.UniqueConstraint('share_token'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('owner_user_id'),
    )
    op.create_index('idx_office_services_office', 'office_services', ['office_id', 'sort_order'])
    op.create_index('idx_office_services_owner', 'office_services', ['owner_user_id'])

    op.create_table(
        'service_ratings',
        _id(),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('visitor_name', sa.String(255), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_id'], ['office_services.id'], ondelete='CASCADE'),
        _user_fk('user_id', 'SET NULL'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_service_ratings_range'),
    )
    op.create_index('idx_service_ratings_service', 'service_ratings', ['service_id'])

    op.create_table(
        'service_comments',
        _id(),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('visitor_name', sa.String(255), nullable=True),
        sa.Column('visitor_email', sa.String(255), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), server_default='published', nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_id'], ['office_services.id'], ondelete='CASCADE'),
        _user_fk('user_id', 'SET NULL'),
        sa.ForeignKeyConstraint(['parent_id'], ['service_comments.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_service_comments_service', 'service_comments', ['service_id', 'created_at'])

    op.create_table(
        'service_requests',
        _id(),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('visitor_name', sa.String(255), nullable=False),
        sa.Column('visitor_email', sa.String(255), nullable=False),
        sa.Column('visitor_phone', sa.String(50), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_id'], ['office_services.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_service_requests_office', 'service_requests', ['office_id', 'status'])

    op.create_table(
        'service_orders',
        _id(),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('office_id', sa.Integer(), nullable=False),
        sa.Column('created_by_user_id', sa.Uuid(), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('client_email', sa.String(255), nullable=True),
        sa.Column('client_phone', sa.String(50), nullable=True),
        sa.Column('quoted_price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), server_default='SAR', nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(30), server_default='pending', nullable=False),
        sa.Column('checkout_session_id', sa.String(255), nullable=True),
        sa.Column('payment_intent_id', sa.String(255), nullable=True),
        sa.Column('invoice_url', sa.Text(), nullable=True),
        sa.Column('chat_thread_id', sa.Integer(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_id'], ['office_services.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['office_id'], ['offices.id'], ondelete='CASCADE'),
        _user_fk('created_by_user_id', 'SET NULL'),
        sa.ForeignKeyConstraint(['chat_thread_id'], ['chat_threads.id'], ondelete='SET NULL'),
    )
    op.create_index('idx_service_orders_office_status', 'service_orders', ['office_id', 'status'])
    op.create_index('idx_service_orders_checkout_session', 'service_orders', ['checkout_session_id'])

    op.create_table(
        'payment_webhook_events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('provider_event_id', sa.String(255), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('payload', JSON_TYPE, nullable=False),
        _created_at('processed_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider_event_id'),
        sa.ForeignKeyConstraint(['order_id'], ['service_orders.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_payment_webhook_events_order_id', 'payment_webhook_events', ['order_id'])

    # ==========================================================================
    # Work: tasks, tickets, meetings, jobs, transactions
    # ==========================================================================
    op.create_table(
        'tasks',
        _id(),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assignee_id', sa.Uuid(), nullable=True),
        sa.Column('creator_id', sa.Uuid(), nullable=True),
        sa.Column('priority', sa.String(20), server_default='medium', nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('assignee_id', 'SET NULL'),
        _user_fk('creator_id', 'SET NULL'),
    )
    op.create_index('idx_tasks_assignee_status', 'tasks', ['assignee_id', 'status'])
    op.create_index('idx_tasks_creator', 'tasks', ['creator_id'])

    op.create_table(
        'tickets',
        _id(),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reporter_id', sa.Uuid(), nullable=True),
        sa.Column('assignee_id', sa.Uuid(), nullable=True),
        sa.Column('priority', sa.String(20), server_default='medium', nullable=True),
        sa.Column('status', sa.String(20), server_default='open', nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('reporter_id', 'SET NULL'),
        _user_fk('assignee_id', 'SET NULL'),
    )
    op.create_index('idx_tickets_status', 'tickets', ['status'])

    op.create_table(
        'meetings',
        _id(),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('organizer_id', sa.Uuid(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), server_default=sa.false(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('organizer_id'),
    )
    op.create_index('idx_meetings_start', 'meetings', ['start_time'])

    op.create_table(
        'meeting_attendees',
        _id(),
        sa.Column('meeting_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['meeting_id'], ['meetings.id'], ondelete='CASCADE'),
        _user_fk('user_id'),
        sa.UniqueConstraint('meeting_id', 'user_id', name='uq_meeting_attendee'),
    )

    op.create_table(
        'job_postings',
        _id(),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('department', sa.String(100), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('type', sa.String(30), server_default='full-time', nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('salary', sa.String(100), nullable=True),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(20), server_default='draft', nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('creator_id'),
    )
    op.create_index('idx_job_postings_status', 'job_postings', ['status'])

    op.create_table(
        'transactions',
        _id(),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), server_default='expense', nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('submitter_id', sa.Uuid(), nullable=False),
        sa.Column('approver_id', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=True),
        sa.Column('receipt_url', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('submitter_id'),
        _user_fk('approver_id', 'SET NULL'),
    )
    op.create_index('idx_transactions_status', 'transactions', ['status'])

    # ==========================================================================
    # Task automations (n8n)
    # ==========================================================================
    op.create_table(
        'n8n_settings',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('webhook_url', sa.Text(), nullable=True),
        sa.Column('api_key', sa.String(255), nullable=True),
        sa.Column('is_enabled', sa.Boolean(), server_default=sa.false(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        _user_fk('user_id'),
    )

    op.create_table(
        'task_automations',
        _id(),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('ai_suggestion', sa.Text(), nullable=True),
        sa.Column('ai_metadata', JSON_TYPE, nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('n8n_execution_id', sa.String(255), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
        _user_fk('user_id'),
        _user_fk('approved_by', 'SET NULL'),
    )
    op.create_index('idx_task_automations_user_status', 'task_automations', ['user_id', 'status'])
    op.create_index('idx_task_automations_task', 'task_automations', ['task_id'])


def downgrade() -> None:
    for table in (
        'task_automations',
        'n8n_settings',
        'transactions',
        'job_postings',
        'meeting_attendees',
        'meetings',
        'tickets',
        'tasks',
        'payment_webhook_events',
        'service_orders',
        'service_requests',
        'service_comments',
        'service_ratings',
        'office_services',
        'status_likes',
        'status_views',
        'status_replies',
        'statuses',
        'post_comments',
        'post_likes',
        'posts',
        'followers',
        'profiles',
        'office_followers',
        'video_calls',
        'office_messages',
        'office_posts',
        'office_media',
        'company_sections',
        'company_departments',
        'offices',
        'internal_emails',
        'push_subscriptions',
        'notifications',
        'messages',
        'chat_participants',
        'chat_threads',
        'stored_objects',
        'admin_audit_logs',
        'users',
    ):
        op.drop_table(table)

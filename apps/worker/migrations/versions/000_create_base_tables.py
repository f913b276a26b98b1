"""Create base tables

Revision ID: 000
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '000'
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()')),
    ]


def upgrade():
    # Create roles table
    op.create_table('roles',
        *_base_columns(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('price', sa.Integer(), default=0),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_roles_id'), 'roles', ['id'])
    op.create_index(op.f('ix_roles_created_at'), 'roles', ['created_at'])
    
    # Create profiles table
    op.create_table('profiles',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('nickname', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('role_id', sa.BigInteger(), nullable=True),
        sa.Column('points', sa.Integer(), default=0),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'])
    op.create_index(op.f('ix_profiles_created_at'), 'profiles', ['created_at'])
    op.create_index(op.f('ix_profiles_user_id'), 'profiles', ['user_id'], unique=True)
    
    # Create subscriptions table
    op.create_table('subscriptions',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('role_id', sa.BigInteger(), nullable=False),
        sa.Column('previous_role_id', sa.BigInteger(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('auto_renew', sa.Boolean(), default=False),
        sa.Column('warning_sent', sa.Boolean(), default=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.user_id'], ),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ),
        sa.ForeignKeyConstraint(['previous_role_id'], ['roles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'])
    op.create_index(op.f('ix_subscriptions_created_at'), 'subscriptions', ['created_at'])
    op.create_index(op.f('ix_subscriptions_user_id'), 'subscriptions', ['user_id'])
    op.create_index(op.f('ix_subscriptions_status'), 'subscriptions', ['status'])
    
    # Create payments table
    op.create_table('payments',
        *_base_columns(),
        sa.Column('subscription_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(), default='ILS'),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['subscription_id'], ['subscriptions.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payments_id'), 'payments', ['id'])
    op.create_index(op.f('ix_payments_created_at'), 'payments', ['created_at'])
    op.create_index(op.f('ix_payments_subscription_id'), 'payments', ['subscription_id'])
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'])
    
    # Create notifications table
    op.create_table('notifications',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('link', sa.String(), nullable=True),
        sa.Column('is_read', sa.Boolean(), default=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.user_id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'])
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'])
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'])
    op.create_index(op.f('ix_notifications_type'), 'notifications', ['type'])
    
    # Create forums tables
    op.create_table('forums',
        *_base_columns(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('posts_count', sa.Integer(), default=0),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_forums_id'), 'forums', ['id'])
    op.create_index(op.f('ix_forums_created_at'), 'forums', ['created_at'])
    
    op.create_table('forum_posts',
        *_base_columns(),
        sa.Column('forum_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('views', sa.Integer(), default=0),
        sa.Column('replies_count', sa.Integer(), default=0),
        sa.Column('likes_count', sa.Integer(), default=0),
        sa.Column('is_pinned', sa.Boolean(), default=False),
        sa.Column('is_locked', sa.Boolean(), default=False),
        sa.ForeignKeyConstraint(['forum_id'], ['forums.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_forum_posts_id'), 'forum_posts', ['id'])
    op.create_index(op.f('ix_forum_posts_created_at'), 'forum_posts', ['created_at'])
    op.create_index(op.f('ix_forum_posts_forum_id'), 'forum_posts', ['forum_id'])
    op.create_index(op.f('ix_forum_posts_user_id'), 'forum_posts', ['user_id'])
    
    op.create_table('forum_post_replies',
        *_base_columns(),
        sa.Column('post_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('parent_id', sa.BigInteger(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_answer', sa.Boolean(), default=False),
        sa.Column('likes_count', sa.Integer(), default=0),
        sa.ForeignKeyConstraint(['post_id'], ['forum_posts.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_forum_post_replies_id'), 'forum_post_replies', ['id'])
    op.create_index(op.f('ix_forum_post_replies_created_at'), 'forum_post_replies', ['created_at'])
    op.create_index(op.f('ix_forum_post_replies_post_id'), 'forum_post_replies', ['post_id'])
    op.create_index(op.f('ix_forum_post_replies_user_id'), 'forum_post_replies', ['user_id'])
    op.create_index(op.f('ix_forum_post_replies_parent_id'), 'forum_post_replies', ['parent_id'])
    
    # Create platform settings table
    op.create_table('platform_settings',
        *_base_columns(),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('string_value', sa.Text(), nullable=True),
        sa.Column('integer_value', sa.Integer(), nullable=True),
        sa.Column('boolean_value', sa.Boolean(), nullable=True),
        sa.Column('json_value', sa.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_platform_settings_id'), 'platform_settings', ['id'])
    op.create_index(op.f('ix_platform_settings_created_at'), 'platform_settings', ['created_at'])
    op.create_index(op.f('ix_platform_settings_key'), 'platform_settings', ['key'], unique=True)
    op.create_index(op.f('ix_platform_settings_category'), 'platform_settings', ['category'])


def downgrade():
    # Reverse dependency order; indexes go with their tables
    for table in (
        'platform_settings',
        'forum_post_replies',
        'forum_posts',
        'forums',
        'notifications',
        'payments',
        'subscriptions',
        'profiles',
        'roles',
    ):
        op.drop_table(table)

"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-08-21 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('image', sa.String(length=512), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=True),
        sa.Column('role', _enum('user_role', 'USER', 'ADMIN', 'SUPER_ADMIN'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'workspaces',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('cover', sa.String(length=512), nullable=True),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('theme', JSON_TYPE, nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('domain'),
    )
    op.create_index('ix_workspaces_slug', 'workspaces', ['slug'], unique=True)
    op.create_index('ix_workspaces_deleted_at', 'workspaces', ['deleted_at'])

    op.create_table(
        'user_workspaces',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('workspace_id', sa.String(length=36), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', _enum('workspace_role', 'MEMBER', 'ADMIN', 'OWNER'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'workspace_id', name='uq_user_workspace'),
    )
    op.create_index('ix_user_workspaces_user_id', 'user_workspaces', ['user_id'])
    op.create_index('ix_user_workspaces_workspace_id', 'user_workspaces', ['workspace_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('workspace_id', sa.String(length=36), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('excerpt', sa.String(length=512), nullable=True),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('video_url', sa.String(length=1024), nullable=True),
        sa.Column('video_type', _enum('video_type', 'YOUTUBE', 'TIKTOK', 'INSTAGRAM'), nullable=True),
        sa.Column('thumbnail', sa.String(length=1024), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_posts_workspace_id', 'posts', ['workspace_id'])
    op.create_index('ix_posts_deleted_at', 'posts', ['deleted_at'])
    op.create_index('ix_posts_workspace_created', 'posts', ['workspace_id', 'created_at'])
    op.create_index(
        'uq_posts_workspace_slug_live',
        'posts',
        ['workspace_id', 'slug'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
        sqlite_where=sa.text('deleted_at IS NULL'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('workspace_id', sa.String(length=36), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=16), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('workspace_id', 'name', name='uq_category_workspace_name'),
    )
    op.create_index('ix_categories_workspace_id', 'categories', ['workspace_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('workspace_id', sa.String(length=36), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('active_affiliate_link_id', sa.String(length=36), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=1024), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='VND'),
        *_timestamps(),
        sa.UniqueConstraint('active_affiliate_link_id'),
    )
    op.create_index('ix_products_workspace_id', 'products', ['workspace_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table(
        'affiliate_links',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('product_id', sa.String(length=36), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('workspace_id', sa.String(length=36), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('original_url', sa.String(length=2048), nullable=False),
        sa.Column('affiliate_url', sa.String(length=2048), nullable=False),
        sa.Column('platform', sa.String(length=64), nullable=False),
        sa.Column('commission', sa.Float(), nullable=True),
        sa.Column('commission_type', _enum('commission_type', 'percentage', 'fixed'), nullable=False),
        sa.Column('tags', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('product_id', 'affiliate_url', name='uq_affiliate_link_product_url'),
    )
    op.create_index('ix_affiliate_links_product_id', 'affiliate_links', ['product_id'])
    op.create_index('ix_affiliate_links_workspace_id', 'affiliate_links', ['workspace_id'])

    # products <-> affiliate_links is a cycle; close it once both tables exist
    with op.batch_alter_table('products') as batch_op:
        batch_op.create_foreign_key(
            'fk_products_active_affiliate_link',
            'affiliate_links',
            ['active_affiliate_link_id'],
            ['id'],
            ondelete='SET NULL',
        )

    op.create_table(
        'post_products',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('post_id', sa.String(length=36), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(length=36), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('timestamp', sa.Integer(), nullable=True),
        sa.Column('position', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('post_id', 'product_id', name='uq_post_product'),
    )
    op.create_index('ix_post_products_post_id', 'post_products', ['post_id'])
    op.create_index('ix_post_products_product_id', 'post_products', ['product_id'])

    op.create_table(
        'post_analytics',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('post_id', sa.String(length=36), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event', _enum('analytics_event', 'VIEW', 'PRODUCT_CLICK', 'SHARE', 'LIKE'), nullable=False),
        sa.Column('product_id', sa.String(length=36), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('affiliate_link_id', sa.String(length=36), sa.ForeignKey('affiliate_links.id', ondelete='SET NULL'), nullable=True),
        sa.Column('metadata', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_post_analytics_post_event', 'post_analytics', ['post_id', 'event'])
    op.create_index('ix_post_analytics_affiliate_link_id', 'post_analytics', ['affiliate_link_id'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('plan', _enum('subscription_plan', 'FREE', 'BASIC', 'PRO', 'ENTERPRISE'), nullable=False),
        sa.Column('status', _enum('subscription_status', 'ACTIVE', 'CANCELED', 'PAST_DUE', 'UNPAID'), nullable=False),
        sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cancel_at_period_end', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stripe_customer_id', sa.String(length=255), nullable=True),
        sa.Column('stripe_subscription_id', sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])


def downgrade():
    op.drop_table('subscriptions')
    op.drop_table('post_analytics')
    op.drop_table('post_products')
    with op.batch_alter_table('products') as batch_op:
        batch_op.drop_constraint('fk_products_active_affiliate_link', type_='foreignkey')
    op.drop_table('affiliate_links')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('posts')
    op.drop_table('user_workspaces')
    op.drop_table('workspaces')
    op.drop_table('users')

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

import bcrypt
from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SqlEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    event,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from affiflow.extensions import db

JSONType = JSON().with_variant(JSONB, 'postgresql')


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class DeletePolicy(Enum):
    SOFT = "soft"
    HARD = "hard"


class SoftDeleteMixin:
    """Rows are hidden from default reads once ``deleted_at`` is set."""

    __delete_policy__ = DeletePolicy.SOFT

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class PlatformRole(Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class WorkspaceRole(Enum):
    """Membership roles, totally ordered MEMBER < ADMIN < OWNER."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"

    @property
    def rank(self) -> int:
        return _WORKSPACE_ROLE_RANK[self]

    def at_least(self, required: WorkspaceRole) -> bool:
        return self.rank >= required.rank


_WORKSPACE_ROLE_RANK = {
    WorkspaceRole.MEMBER: 0,
    WorkspaceRole.ADMIN: 1,
    WorkspaceRole.OWNER: 2,
}


class VideoType(Enum):
    YOUTUBE = "YOUTUBE"
    TIKTOK = "TIKTOK"
    INSTAGRAM = "INSTAGRAM"


class AnalyticsEventType(Enum):
    VIEW = "VIEW"
    PRODUCT_CLICK = "PRODUCT_CLICK"
    SHARE = "SHARE"
    LIKE = "LIKE"


class CommissionType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class SubscriptionPlan(Enum):
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class SubscriptionStatus(Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    PAST_DUE = "PAST_DUE"
    UNPAID = "UNPAID"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(TimestampedBase):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255))
    image: Mapped[str | None] = mapped_column(String(512))
    # Accounts provisioned through another sign-in method have no password
    password_hash: Mapped[str | None] = mapped_column('password', String(255))
    role: Mapped[PlatformRole] = mapped_column(
        SqlEnum(PlatformRole, name="user_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=PlatformRole.USER,
    )

    memberships: Mapped[list["Membership"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    subscriptions: Mapped[list["Subscription"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str, rounds: int = 12) -> None:
        self.password_hash = bcrypt.hashpw(
            password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)
        ).decode('utf-8')

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    def has_platform_role(self, *roles: PlatformRole | str) -> bool:
        allowed = {r.value if isinstance(r, PlatformRole) else str(r) for r in roles}
        return self.role.value in allowed

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:  # Flask-Login compatibility
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    def get_id(self) -> str:
        return self.id


class Workspace(SoftDeleteMixin, TimestampedBase):
    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    avatar: Mapped[str | None] = mapped_column(String(512))
    cover: Mapped[str | None] = mapped_column(String(512))
    domain: Mapped[str | None] = mapped_column(String(255), unique=True)
    theme: Mapped[dict | None] = mapped_column(JSONType)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    memberships: Mapped[list["Membership"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
    )
    posts: Mapped[list["Post"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
    )
    products: Mapped[list["Product"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
    )
    categories: Mapped[list["Category"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
    )


class Membership(TimestampedBase):
    __tablename__ = "user_workspaces"
    __table_args__ = (
        UniqueConstraint("user_id", "workspace_id", name="uq_user_workspace"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[WorkspaceRole] = mapped_column(
        SqlEnum(WorkspaceRole, name="workspace_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=WorkspaceRole.MEMBER,
    )

    user: Mapped[User] = relationship(back_populates="memberships")
    workspace: Mapped[Workspace] = relationship(back_populates="memberships")


class Post(SoftDeleteMixin, TimestampedBase):
    __tablename__ = "posts"
    __table_args__ = (
        # Soft-deleted posts release their slug
        Index(
            "uq_posts_workspace_slug_live",
            "workspace_id",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("ix_posts_workspace_created", "workspace_id", "created_at"),
    )

    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text)
    excerpt: Mapped[str | None] = mapped_column(String(512))
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    video_url: Mapped[str | None] = mapped_column(String(1024))
    video_type: Mapped[VideoType | None] = mapped_column(
        SqlEnum(VideoType, name="video_type", native_enum=False, values_callable=_enum_values),
    )
    thumbnail: Mapped[str | None] = mapped_column(String(1024))
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    workspace: Mapped[Workspace] = relationship(back_populates="posts")
    product_links: Mapped[list["PostProduct"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostProduct.timestamp",
    )
    events: Mapped[list["AnalyticsEvent"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
    )


class Category(TimestampedBase):
    __tablename__ = "categories"
    __delete_policy__ = DeletePolicy.HARD
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", name="uq_category_workspace_name"),
    )

    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(String(16))

    workspace: Mapped[Workspace] = relationship(back_populates="categories")
    products: Mapped[list["Product"]] = relationship(
        back_populates="category",
        order_by="Product.created_at.desc()",
    )


class Product(TimestampedBase):
    __tablename__ = "products"
    __delete_policy__ = DeletePolicy.HARD

    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        index=True,
    )
    # The active link is a back-reference owned by the product, not a flag on the link
    active_affiliate_link_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey(
            "affiliate_links.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_products_active_affiliate_link",
        ),
        unique=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    image: Mapped[str | None] = mapped_column(String(1024))
    price: Mapped[float | None] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default='VND')

    workspace: Mapped[Workspace] = relationship(back_populates="products")
    category: Mapped[Category | None] = relationship(back_populates="products")
    affiliate_links: Mapped[list["AffiliateLink"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        foreign_keys="AffiliateLink.product_id",
        order_by="AffiliateLink.created_at.desc()",
    )
    post_links: Mapped[list["PostProduct"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
    )


class AffiliateLink(TimestampedBase):
    __tablename__ = "affiliate_links"
    __delete_policy__ = DeletePolicy.HARD
    __table_args__ = (
        UniqueConstraint("product_id", "affiliate_url", name="uq_affiliate_link_product_url"),
    )

    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    original_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    affiliate_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    platform: Mapped[str] = mapped_column(String(64), nullable=False)
    commission: Mapped[float | None] = mapped_column(Float)
    commission_type: Mapped[CommissionType] = mapped_column(
        SqlEnum(CommissionType, name="commission_type", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=CommissionType.PERCENTAGE,
    )
    tags: Mapped[str | None] = mapped_column(String(255))

    product: Mapped[Product] = relationship(
        back_populates="affiliate_links",
        foreign_keys=[product_id],
    )


class PostProduct(db.Model):
    __tablename__ = "post_products"
    __table_args__ = (
        UniqueConstraint("post_id", "product_id", name="uq_post_product"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Seconds into the video where the product appears
    timestamp: Mapped[int | None] = mapped_column(Integer)
    position: Mapped[dict | None] = mapped_column(JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    post: Mapped[Post] = relationship(back_populates="product_links")
    product: Mapped[Product] = relationship(back_populates="post_links")


class AnalyticsEvent(db.Model):
    __tablename__ = "post_analytics"
    __table_args__ = (
        Index("ix_post_analytics_post_event", "post_id", "event"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    event: Mapped[AnalyticsEventType] = mapped_column(
        SqlEnum(AnalyticsEventType, name="analytics_event", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    product_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="SET NULL"),
    )
    affiliate_link_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("affiliate_links.id", ondelete="SET NULL"),
        index=True,
    )
    meta: Mapped[dict | None] = mapped_column('metadata', JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    post: Mapped[Post] = relationship(back_populates="events")


@event.listens_for(AnalyticsEvent, "before_update")
@event.listens_for(AnalyticsEvent, "before_delete")
def _refuse_event_change(mapper, connection, target) -> None:
    raise PermissionError("Analytics events are append-only")


class Subscription(TimestampedBase):
    __tablename__ = "subscriptions"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan: Mapped[SubscriptionPlan] = mapped_column(
        SqlEnum(SubscriptionPlan, name="subscription_plan", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        SqlEnum(SubscriptionStatus, name="subscription_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    current_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    current_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255))
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255))

    user: Mapped[User] = relationship(back_populates="subscriptions")

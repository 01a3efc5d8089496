"""ORM models for AffiFlow."""

from affiflow.models.models import (
    AffiliateLink,
    AnalyticsEvent,
    AnalyticsEventType,
    Category,
    CommissionType,
    DeletePolicy,
    Membership,
    PlatformRole,
    Post,
    PostProduct,
    Product,
    SoftDeleteMixin,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
    TimestampedBase,
    User,
    VideoType,
    Workspace,
    WorkspaceRole,
)

__all__ = [
    "AffiliateLink",
    "AnalyticsEvent",
    "AnalyticsEventType",
    "Category",
    "CommissionType",
    "DeletePolicy",
    "Membership",
    "PlatformRole",
    "Post",
    "PostProduct",
    "Product",
    "SoftDeleteMixin",
    "Subscription",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "TimestampedBase",
    "User",
    "VideoType",
    "Workspace",
    "WorkspaceRole",
]

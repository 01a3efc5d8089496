"""Domain services. Each takes the SQLAlchemy session it works in."""

from affiflow.services.affiliate_links import AffiliateLinkService
from affiflow.services.analytics import AnalyticsRecorder
from affiflow.services.categories import CategoryService
from affiflow.services.posts import PostService
from affiflow.services.products import ProductService
from affiflow.services.routing import TenantResolver
from affiflow.services.workspaces import WorkspaceService

__all__ = [
    "AffiliateLinkService",
    "AnalyticsRecorder",
    "CategoryService",
    "PostService",
    "ProductService",
    "TenantResolver",
    "WorkspaceService",
]

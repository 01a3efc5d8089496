"""Append-only analytics events for posts."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from affiflow.errors import NotFoundError, ValidationError
from affiflow.models import AffiliateLink, AnalyticsEvent, AnalyticsEventType, Post, Product
from affiflow.services.db import atomic


class AnalyticsRecorder:
    """Records and aggregates post events.

    Events are never updated or deleted; a mapper hook on
    :class:`AnalyticsEvent` refuses updates.
    """

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        post: Post,
        kind: AnalyticsEventType,
        metadata: dict[str, Any] | None = None,
        product_id: str | None = None,
        affiliate_link_id: str | None = None,
    ) -> AnalyticsEvent:
        if product_id is not None:
            product = self.session.execute(
                select(Product).where(
                    Product.id == product_id,
                    Product.workspace_id == post.workspace_id,
                )
            ).scalar_one_or_none()
            if product is None:
                raise NotFoundError("Product not found")
            if kind is AnalyticsEventType.PRODUCT_CLICK and affiliate_link_id is None:
                # Attribute the click to whichever link the product currently promotes
                affiliate_link_id = product.active_affiliate_link_id

        if affiliate_link_id is not None:
            link = self.session.execute(
                select(AffiliateLink).where(
                    AffiliateLink.id == affiliate_link_id,
                    AffiliateLink.workspace_id == post.workspace_id,
                )
            ).scalar_one_or_none()
            if link is None:
                raise NotFoundError("Affiliate link not found")
            if product_id is None:
                product_id = link.product_id
            elif link.product_id != product_id:
                raise ValidationError.for_field(
                    'affiliateLinkId', "Affiliate link does not belong to this product"
                )

        if kind is AnalyticsEventType.PRODUCT_CLICK and product_id is None:
            raise ValidationError.for_field('productId', "Product clicks need a product")

        with atomic(self.session):
            event = AnalyticsEvent(
                post_id=post.id,
                event=kind,
                product_id=product_id,
                affiliate_link_id=affiliate_link_id,
                meta=metadata,
            )
            self.session.add(event)

        current_app.logger.debug(f"Recorded {kind.value} for post {post.id}")
        return event

    def summarize_post(self, post_id: str) -> dict[str, int]:
        """Event count per kind; kinds with no events report zero."""
        stmt = (
            select(AnalyticsEvent.event, func.count(AnalyticsEvent.id))
            .where(AnalyticsEvent.post_id == post_id)
            .group_by(AnalyticsEvent.event)
        )
        counts = {kind.value: 0 for kind in AnalyticsEventType}
        for kind, count in self.session.execute(stmt):
            counts[kind.value] = count
        return counts

    def link_click_counts(self, link_ids: list[str]) -> dict[str, int]:
        if not link_ids:
            return {}
        stmt = (
            select(AnalyticsEvent.affiliate_link_id, func.count(AnalyticsEvent.id))
            .where(
                AnalyticsEvent.affiliate_link_id.in_(link_ids),
                AnalyticsEvent.event == AnalyticsEventType.PRODUCT_CLICK,
            )
            .group_by(AnalyticsEvent.affiliate_link_id)
        )
        counts = {link_id: 0 for link_id in link_ids}
        counts.update({row[0]: row[1] for row in self.session.execute(stmt)})
        return counts


__all__ = ["AnalyticsRecorder"]

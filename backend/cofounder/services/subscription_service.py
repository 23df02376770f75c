"""SubscriptionSession: session-scoped entitlement state with explicit refresh.

The session holds the last fetched profile snapshot only. ``has_access`` and
``days_remaining`` are recomputed against the clock on every read, so an end
date that passes mid-session is observed without a refetch.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.models.profile import Profile
from cofounder.domain.entitlement import SubscriptionEntitlement, days_remaining

logger = structlog.get_logger(__name__)


@dataclass
class SubscriptionStatusView:
    has_access: bool
    is_legacy_user: bool
    is_subscribed: bool
    subscription_plan: str | None
    subscription_end_date: datetime | None
    days_remaining: int | None


class SubscriptionSession:
    """Entitlement state for one user, passed explicitly to request handlers.

    Usage::

        subscription = SubscriptionSession(user_id)
        await subscription.refetch(session)
        if not subscription.has_access():
            ...
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self._entitlement: SubscriptionEntitlement | None = None

    @property
    def loaded(self) -> bool:
        return self._entitlement is not None

    @property
    def entitlement(self) -> SubscriptionEntitlement:
        if self._entitlement is None:
            raise RuntimeError("Subscription state not loaded. Call refetch() first.")
        return self._entitlement

    async def refetch(self, session: AsyncSession) -> SubscriptionEntitlement:
        """Reload the four entitlement fields from the profile row."""
        result = await session.execute(select(Profile).where(Profile.user_id == self.user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            logger.info("subscription_profile_missing", user_id=self.user_id)
        self._entitlement = SubscriptionEntitlement.from_profile(profile)
        return self._entitlement

    def invalidate(self) -> None:
        """Drop the snapshot; the next read requires ``refetch()``."""
        self._entitlement = None

    def has_access(self, now: datetime | None = None) -> bool:
        return self.entitlement.has_access(now)

    def is_subscribed(self, now: datetime | None = None) -> bool:
        return self.entitlement.is_subscribed(now)

    def status(self, now: datetime | None = None) -> SubscriptionStatusView:
        now = now or datetime.now(timezone.utc)
        entitlement = self.entitlement
        end_date = entitlement.subscription_end_date
        return SubscriptionStatusView(
            has_access=entitlement.has_access(now),
            is_legacy_user=entitlement.is_legacy_user,
            is_subscribed=entitlement.is_subscribed(now),
            subscription_plan=entitlement.subscription_plan,
            subscription_end_date=end_date,
            days_remaining=days_remaining(end_date, now) if end_date is not None else None,
        )

"""Subscription entitlement rules.

Pure domain functions deciding whether a founder may use gated features.
No DB access, no caching: the answer depends on the wall clock, so callers
re-evaluate on every check.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 86400


class PlanType(StrEnum):
    """Billing intervals offered on the pricing page."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(StrEnum):
    ACTIVE = "active"


@dataclass(frozen=True)
class SubscriptionEntitlement:
    """Snapshot of the four profile fields the access decision depends on."""

    is_legacy_user: bool = False
    subscription_status: str | None = None
    subscription_plan: str | None = None
    subscription_end_date: datetime | None = None

    @classmethod
    def from_profile(cls, profile: Any | None) -> "SubscriptionEntitlement":
        """Build from a Profile row (or any object with the same attributes).

        A missing profile means no legacy flag and no subscription.
        """
        if profile is None:
            return cls()
        return cls(
            is_legacy_user=bool(getattr(profile, "is_legacy_user", False)),
            subscription_status=getattr(profile, "subscription_status", None),
            subscription_plan=getattr(profile, "subscription_plan", None),
            subscription_end_date=getattr(profile, "subscription_end_date", None),
        )

    def is_subscribed(self, now: datetime | None = None) -> bool:
        return is_subscription_active(self.subscription_status, self.subscription_end_date, now)

    def has_access(self, now: datetime | None = None) -> bool:
        return self.is_legacy_user or self.is_subscribed(now)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_subscription_active(
    status: str | None,
    end_date: datetime | None,
    now: datetime | None = None,
) -> bool:
    """Paid subscription check: status is active and end_date is strictly in the future."""
    if status != SubscriptionStatus.ACTIVE or end_date is None:
        return False
    if now is None:
        now = datetime.now(timezone.utc)
    return as_utc(end_date) > as_utc(now)


def has_access(profile: Any | None, now: datetime | None = None) -> bool:
    """Return True if the founder may use gated features.

    Access = is_legacy_user OR (subscription_status == "active" AND subscription_end_date > now).
    An end date equal to ``now`` grants no access.
    """
    return SubscriptionEntitlement.from_profile(profile).has_access(now)


def days_remaining(end_date: datetime, now: datetime | None = None) -> int:
    """Whole days between now and end_date, truncated toward zero.

    Negative once the subscription has expired by at least a full day; callers
    read a negative value as "expired".
    """
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = (as_utc(end_date) - as_utc(now)).total_seconds()
    return int(seconds / SECONDS_PER_DAY)


def compute_end_date(plan_type: PlanType | str, start: datetime) -> datetime:
    """Subscription end date using calendar-aware addition.

    One month after Jan 31 is the last day of February (month-end clamping),
    one year after Feb 29 is Feb 28.
    """
    plan = PlanType(plan_type)
    if plan == PlanType.MONTHLY:
        return start + relativedelta(months=1)
    return start + relativedelta(years=1)

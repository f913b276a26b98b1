"""
Subscription lifecycle evaluation

Classifies a subscription relative to its end date and reports which
housekeeping action (warning notice or automatic downgrade) is due.
Nothing here reads the clock or touches the database: the caller passes
"now" in and performs whatever the result asks for.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel


GRACE_PERIOD_DAYS = 2
DAYS_AFTER_WARNING = 3

ONE_DAY = timedelta(days=1)


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class LifecycleState(str, Enum):
    UNLIMITED = "unlimited"
    ACTIVE = "active"
    GRACE_PERIOD = "grace_period"
    NEEDS_WARNING = "needs_warning"
    NEEDS_DOWNGRADE = "needs_downgrade"
    EXPIRED_ACKNOWLEDGED = "expired_acknowledged"


class LifecycleError(Exception):
    pass


class InvalidInput(LifecycleError):
    """Subscription row with missing or contradictory dates"""

    def __init__(self, subscription_id: Any, reason: str):
        self.subscription_id = subscription_id
        self.reason = reason
        super().__init__(f"Subscription {subscription_id}: {reason}")


class SubscriptionRecord(BaseModel):
    id: Any
    status: SubscriptionStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    class Config:
        from_attributes = True
        frozen = True


class LifecyclePolicy(BaseModel):
    grace_days: int = GRACE_PERIOD_DAYS
    days_after_warning: int = DAYS_AFTER_WARNING

    class Config:
        frozen = True

    @property
    def warning_after_days(self) -> int:
        return self.grace_days

    @property
    def downgrade_after_days(self) -> int:
        return self.grace_days + self.days_after_warning


DEFAULT_POLICY = LifecyclePolicy()


class SkippedSubscription(BaseModel):
    record: SubscriptionRecord
    reason: str


class DueActions(BaseModel):
    to_warn: List[SubscriptionRecord] = []
    to_downgrade: List[SubscriptionRecord] = []
    skipped: List[SkippedSubscription] = []


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps coming from the database are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _validate(subscription: SubscriptionRecord):
    if subscription.start_date is None:
        raise InvalidInput(subscription.id, "start_date is missing")
    if subscription.end_date is not None and _as_utc(subscription.end_date) < _as_utc(subscription.start_date):
        raise InvalidInput(subscription.id, "end_date is before start_date")


def days_past_end(subscription: SubscriptionRecord, now: datetime) -> int:
    """Whole days elapsed since end_date, floored; 0 when not yet ended or unlimited"""
    if subscription.end_date is None:
        return 0
    elapsed = _as_utc(now) - _as_utc(subscription.end_date)
    if elapsed <= timedelta(0):
        return 0
    return elapsed // ONE_DAY


def classify(subscription: SubscriptionRecord, now: datetime, policy: LifecyclePolicy = DEFAULT_POLICY) -> LifecycleState:
    """
    Classify a subscription at instant `now`.

    Raises InvalidInput when start_date is missing or end_date precedes
    start_date. A pending subscription past the downgrade cutoff stays in
    NEEDS_WARNING: only active subscriptions are downgraded automatically.
    """
    _validate(subscription)

    if subscription.end_date is None:
        return LifecycleState.UNLIMITED

    if _as_utc(subscription.end_date) >= _as_utc(now):
        return LifecycleState.ACTIVE

    if subscription.status in (SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED):
        return LifecycleState.EXPIRED_ACKNOWLEDGED

    days = days_past_end(subscription, now)
    if days < policy.warning_after_days:
        return LifecycleState.GRACE_PERIOD
    if days < policy.downgrade_after_days:
        return LifecycleState.NEEDS_WARNING
    if subscription.status == SubscriptionStatus.ACTIVE:
        return LifecycleState.NEEDS_DOWNGRADE
    return LifecycleState.NEEDS_WARNING


def due_actions(subscriptions: Iterable[SubscriptionRecord], now: datetime, policy: LifecyclePolicy = DEFAULT_POLICY) -> DueActions:
    """Split a snapshot into subscriptions to warn and to downgrade, keeping input order"""
    result = DueActions()

    for subscription in subscriptions:
        try:
            state = classify(subscription, now, policy)
        except InvalidInput as e:
            result.skipped.append(SkippedSubscription(record=subscription, reason=e.reason))
            continue

        if state == LifecycleState.NEEDS_WARNING:
            result.to_warn.append(subscription)
        elif state == LifecycleState.NEEDS_DOWNGRADE:
            result.to_downgrade.append(subscription)

    return result

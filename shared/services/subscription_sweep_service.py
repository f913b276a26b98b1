"""
Subscription expiry sweep

Runs the evaluator over every past-due subscription and carries out what it
asks for: a one-time warning notice once the grace period is over, then an
automatic downgrade to the previous role when no payment has arrived.
"""
from datetime import datetime
from typing import Any, List, Optional
import logging
import pytz
from pydantic import BaseModel

from shared.config.redis import RedisLock
from shared.config.settings import settings
from .settings_service import SettingsService
from .subscription_service import SubscriptionService
from .subscription_lifecycle import (
    DEFAULT_POLICY,
    LifecyclePolicy,
    SubscriptionRecord,
    due_actions,
)

logger = logging.getLogger(__name__)

SWEEP_LOCK_KEY = "subscription_sweep:lock"

# Payment look-back windows
WARNING_PAYMENT_WINDOW_DAYS = 30
DOWNGRADE_PAYMENT_WINDOW_DAYS = 7


class SweepResult(BaseModel):
    subscription_id: Any
    user_id: Optional[str] = None
    status: str  # warned, warning_cleared, already_warned, extended, cancelled, error
    new_end_date: Optional[datetime] = None
    error: Optional[str] = None


class SkippedResult(BaseModel):
    subscription_id: Any
    reason: str


class SweepReport(BaseModel):
    ran: bool = True
    reason: Optional[str] = None
    checked: int = 0
    warnings_sent: int = 0
    downgraded: int = 0
    extended: int = 0
    warnings: List[SweepResult] = []
    downgrades: List[SweepResult] = []
    skipped: List[SkippedResult] = []


class SubscriptionSweepService:
    def __init__(self, subscription_service: SubscriptionService, settings_service: Optional[SettingsService] = None, redis_client=None):
        self.subscriptions = subscription_service
        self.settings_service = settings_service
        self.redis = redis_client
        self.timezone = pytz.timezone(settings.notification_timezone)

    async def run_sweep(self, now: datetime, policy: LifecyclePolicy = DEFAULT_POLICY) -> SweepReport:
        """Run one sweep against the subscriptions as they are at `now`"""
        if self.settings_service:
            enabled = await self.settings_service.get_setting('subscription_sweep_enabled', True)
            if not enabled:
                logger.info("Subscription sweep disabled in settings")
                return SweepReport(ran=False, reason="disabled")

        lock = RedisLock(self.redis, SWEEP_LOCK_KEY, settings.sweep_lock_ttl_seconds)
        if not await lock.acquire():
            logger.info("Another subscription sweep is in progress, skipping")
            return SweepReport(ran=False, reason="locked")

        try:
            return await self._sweep(now, policy)
        finally:
            await lock.release()

    async def _sweep(self, now: datetime, policy: LifecyclePolicy) -> SweepReport:
        rows = await self.subscriptions.list_past_due(now)
        by_id = {row.id: row for row in rows}
        actions = due_actions([SubscriptionRecord.model_validate(row) for row in rows], now, policy)

        report = SweepReport(checked=len(rows))

        for skipped in actions.skipped:
            logger.warning(f"Skipping subscription {skipped.record.id}: {skipped.reason}")
            report.skipped.append(SkippedResult(subscription_id=skipped.record.id, reason=skipped.reason))

        for record in actions.to_warn:
            result = await self._process_warning(by_id[record.id], now, policy)
            if result.status == "warned":
                report.warnings_sent += 1
            report.warnings.append(result)

        for record in actions.to_downgrade:
            result = await self._process_downgrade(by_id[record.id], now)
            if result.status == "cancelled":
                report.downgraded += 1
            elif result.status == "extended":
                report.extended += 1
            report.downgrades.append(result)

        logger.info(
            f"Subscription sweep done: checked={report.checked} warned={report.warnings_sent} "
            f"downgraded={report.downgraded} extended={report.extended} skipped={len(report.skipped)}"
        )
        return report

    async def _process_warning(self, subscription, now: datetime, policy: LifecyclePolicy) -> SweepResult:
        """Send the expiry warning once; clear the flag again if the member has paid"""
        result = SweepResult(subscription_id=subscription.id, user_id=subscription.user_id, status="already_warned")
        try:
            has_payment = await self.subscriptions.has_recent_payment(subscription.id, WARNING_PAYMENT_WINDOW_DAYS, now)

            if has_payment:
                if subscription.warning_sent:
                    await self.subscriptions.set_warning_sent(subscription.id, False)
                result.status = "warning_cleared"
                return result

            if subscription.warning_sent:
                return result

            await self.subscriptions.create_notification(
                subscription.user_id,
                "subscription_expiring",
                "המנוי שלך עומד לרדת",
                f"המנוי שלך פג ב-{self._format_date(subscription.end_date)} ולא התקבל תשלום. "
                f"אם לא יתקבל תשלום תוך {policy.days_after_warning} ימים, המנוי ירד למנוי הקודם שלך.",
                link="/subscription"
            )
            await self.subscriptions.set_warning_sent(subscription.id, True)
            result.status = "warned"
            logger.info(f"Sent expiry warning for subscription {subscription.id}")

        except Exception as e:
            await self.subscriptions.rollback()
            logger.error(f"Error processing warning for subscription {subscription.id}: {e}")
            result.status = "error"
            result.error = str(e)

        return result

    async def _process_downgrade(self, subscription, now: datetime) -> SweepResult:
        """Extend when a payment arrived in the last week, otherwise revert to the previous role"""
        result = SweepResult(subscription_id=subscription.id, user_id=subscription.user_id, status="cancelled")
        try:
            has_payment = await self.subscriptions.has_recent_payment(subscription.id, DOWNGRADE_PAYMENT_WINDOW_DAYS, now)

            if has_payment:
                extended = await self.subscriptions.extend_subscription(subscription.id, months=1, from_date=now)
                result.status = "extended"
                result.new_end_date = extended.end_date
                return result

            await self.subscriptions.cancel_and_restore_role(subscription.id)
            await self.subscriptions.create_notification(
                subscription.user_id,
                "subscription_expired",
                "המנוי שלך פג",
                "המנוי שלך פג עקב חוסר תשלום. הוחזרת למנוי הקודם שלך.",
                link="/subscription"
            )
            logger.info(f"Downgraded subscription {subscription.id}")

        except Exception as e:
            await self.subscriptions.rollback()
            logger.error(f"Error downgrading subscription {subscription.id}: {e}")
            result.status = "error"
            result.error = str(e)

        return result

    def _format_date(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = pytz.UTC.localize(value)
        return value.astimezone(self.timezone).strftime("%d.%m.%Y")

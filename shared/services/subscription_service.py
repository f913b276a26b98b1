from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from datetime import datetime, timedelta
from dateutil.relativedelta import relativedelta
from typing import List, Optional
import logging

from shared.models.user import Profile, Role
from shared.models.subscription import Subscription, Payment
from shared.models.notification import Notification

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        result = await self.session.execute(
            select(Subscription).where(Subscription.id == subscription_id)
        )
        return result.scalar_one_or_none()

    async def list_past_due(self, now: datetime) -> List[Subscription]:
        """Active subscriptions whose end_date has already passed, oldest first"""
        result = await self.session.execute(
            select(Subscription)
            .where(Subscription.status == "active")
            .where(Subscription.end_date.is_not(None))
            .where(Subscription.end_date < now)
            .order_by(Subscription.end_date.asc())
        )
        return list(result.scalars().all())

    async def has_recent_payment(self, subscription_id: int, days: int, now: datetime) -> bool:
        result = await self.session.execute(
            select(Payment.id)
            .where(Payment.subscription_id == subscription_id)
            .where(Payment.status == "completed")
            .where(Payment.payment_date >= now - timedelta(days=days))
            .limit(1)
        )
        return result.first() is not None

    async def set_warning_sent(self, subscription_id: int, value: bool):
        await self.session.execute(
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .values(warning_sent=value)
        )
        await self.session.commit()

    async def extend_subscription(self, subscription_id: int, months: int = 1, from_date: Optional[datetime] = None) -> Subscription:
        """Push end_date forward by whole calendar months and clear the warning flag"""
        subscription = await self.get_subscription(subscription_id)
        if not subscription:
            raise ValueError(f"Subscription {subscription_id} not found")

        base = from_date or subscription.end_date or datetime.utcnow()
        subscription.end_date = base + relativedelta(months=months)
        subscription.warning_sent = False
        await self.session.commit()
        await self.session.refresh(subscription)

        logger.info(f"Extended subscription {subscription_id} until {subscription.end_date.isoformat()}")
        return subscription

    async def cancel_and_restore_role(self, subscription_id: int):
        """Mark the subscription expired and put the member back on their previous role"""
        subscription = await self.get_subscription(subscription_id)
        if not subscription:
            raise ValueError(f"Subscription {subscription_id} not found")

        role_to_restore = subscription.previous_role_id
        if not role_to_restore:
            result = await self.session.execute(
                select(Role.id).where(Role.name == "free")
            )
            role_to_restore = result.scalar_one_or_none()
            if not role_to_restore:
                raise ValueError("Free role not found")

        subscription.status = "expired"
        await self.session.execute(
            update(Profile)
            .where(Profile.user_id == subscription.user_id)
            .values(role_id=role_to_restore)
        )
        await self.session.commit()

    async def create_notification(self, user_id: str, notification_type: str, title: str, message: str, link: str = None) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            link=link,
            is_read=False
        )
        self.session.add(notification)
        await self.session.commit()
        return notification

    async def rollback(self):
        """Discard a failed transaction so the session can be used for the next subscription"""
        await self.session.rollback()

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from typing import Any, Optional
from datetime import datetime
import logging

from shared.config.database import get_db
from shared.config.redis import get_redis
from shared.config.settings import settings
from shared.services.settings_service import SettingsService
from shared.services.subscription_service import SubscriptionService
from shared.services.subscription_sweep_service import SubscriptionSweepService, SweepReport
from shared.services.subscription_lifecycle import (
    InvalidInput,
    LifecyclePolicy,
    LifecycleState,
    SubscriptionRecord,
    classify,
    days_past_end,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class LifecycleResponse(BaseModel):
    subscription_id: Any
    status: str
    end_date: Optional[datetime]
    state: LifecycleState
    days_past_end: int
    warning_sent: bool


class ExtendResponse(BaseModel):
    subscription_id: Any
    end_date: datetime


class SweepToggleResponse(BaseModel):
    enabled: bool


def get_subscription_service(db: AsyncSession = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)


def get_settings_service(db: AsyncSession = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


async def get_sweep_service(db: AsyncSession = Depends(get_db)) -> SubscriptionSweepService:
    return SubscriptionSweepService(SubscriptionService(db), SettingsService(db), await get_redis())


@router.get("/check-status", response_model=SweepReport)
async def check_status(
    grace_days: int = Query(settings.grace_days, ge=0),
    days_after_warning: int = Query(settings.days_after_warning, ge=0),
    sweep_service: SubscriptionSweepService = Depends(get_sweep_service)
):
    """Run the expiry sweep now: send due warnings and downgrade unpaid subscriptions"""
    policy = LifecyclePolicy(grace_days=grace_days, days_after_warning=days_after_warning)
    try:
        return await sweep_service.run_sweep(datetime.utcnow(), policy)
    except Exception as e:
        logger.error(f"Error checking subscription status: {e}")
        raise HTTPException(status_code=500, detail=f"Subscription sweep failed: {str(e)}")


@router.post("/sweep/enabled", response_model=SweepToggleResponse)
async def set_sweep_enabled(
    enabled: bool,
    settings_service: SettingsService = Depends(get_settings_service)
):
    """Turn the automatic expiry sweep on or off"""
    await settings_service.set_setting('subscription_sweep_enabled', enabled, category="subscriptions", changed_by="admin")
    return SweepToggleResponse(enabled=enabled)


@router.get("/{subscription_id}/lifecycle", response_model=LifecycleResponse)
async def get_lifecycle(
    subscription_id: int,
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """Where a subscription currently stands relative to its end date"""
    subscription = await subscription_service.get_subscription(subscription_id)
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")

    now = datetime.utcnow()
    record = SubscriptionRecord.model_validate(subscription)
    policy = LifecyclePolicy(grace_days=settings.grace_days, days_after_warning=settings.days_after_warning)
    try:
        state = classify(record, now, policy)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=e.reason)

    return LifecycleResponse(
        subscription_id=subscription.id,
        status=subscription.status,
        end_date=subscription.end_date,
        state=state,
        days_past_end=days_past_end(record, now),
        warning_sent=bool(subscription.warning_sent)
    )


@router.post("/{subscription_id}/extend", response_model=ExtendResponse)
async def extend_subscription(
    subscription_id: int,
    months: int = Query(1, ge=1, le=24),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """Extend a subscription by whole months from its current end date"""
    try:
        subscription = await subscription_service.extend_subscription(subscription_id, months)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ExtendResponse(subscription_id=subscription.id, end_date=subscription.end_date)

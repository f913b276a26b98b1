import asyncio
import logging
from datetime import datetime

from shared.config.settings import settings
from shared.config.database import init_db, async_session
from shared.config.redis import init_redis, get_redis
from shared.services.settings_service import SettingsService
from shared.services.subscription_service import SubscriptionService
from shared.services.subscription_sweep_service import SubscriptionSweepService
from shared.services.subscription_lifecycle import LifecyclePolicy

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


async def run_subscription_sweep(policy: LifecyclePolicy):
    async with async_session() as session:
        sweep_service = SubscriptionSweepService(
            SubscriptionService(session),
            SettingsService(session),
            await get_redis()
        )
        return await sweep_service.run_sweep(datetime.utcnow(), policy)


async def subscription_sweep_scheduler():
    """Background task for the subscription expiry sweep"""
    policy = LifecyclePolicy(grace_days=settings.grace_days, days_after_warning=settings.days_after_warning)
    while True:
        try:
            await run_subscription_sweep(policy)
            await asyncio.sleep(settings.sweep_interval_seconds)
        except Exception as e:
            logger.error(f"Error in subscription sweep scheduler: {e}")
            # Wait before retrying on error
            await asyncio.sleep(settings.sweep_retry_seconds)


async def main():
    await init_db()
    logger.info("Database initialized")
    
    await init_redis()
    logger.info("Redis initialized")
    
    logger.info("Starting subscription sweep scheduler...")
    await subscription_sweep_scheduler()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Worker stopped")

import redis.asyncio as redis
from typing import Optional
import logging
import uuid
from .settings import settings

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


async def init_redis():
    """Initialize Redis connection"""
    global redis_client
    redis_client = redis.from_url(
        settings.redis_url,
        decode_responses=True
    )
    
    # Test connection
    try:
        await redis_client.ping()
        logger.info("Redis connected")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}")
        redis_client = None


async def get_redis() -> Optional[redis.Redis]:
    """Get Redis client instance"""
    return redis_client


# Delete the key only while it still holds our token
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisLock:
    """Single-holder lock built on SET NX EX, owned through a random token"""
    
    def __init__(self, client: Optional[redis.Redis], key: str, ttl: int):
        self.redis = client
        self.key = key
        self.ttl = ttl
        self.token = uuid.uuid4().hex
        self.acquired = False
    
    async def acquire(self) -> bool:
        # Without Redis there is nothing to coordinate with
        if not self.redis:
            self.acquired = True
            return True
        
        self.acquired = bool(await self.redis.set(self.key, self.token, nx=True, ex=self.ttl))
        return self.acquired
    
    async def release(self):
        if self.redis and self.acquired:
            released = await self.redis.eval(RELEASE_SCRIPT, 1, self.key, self.token)
            if not released:
                logger.warning(f"Lock {self.key} expired before release, left to its new holder")
        self.acquired = False

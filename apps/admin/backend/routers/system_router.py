from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
import logging

from shared.config.database import get_db
from shared.config.redis import get_redis

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str
    redis: str
    api_version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """System health check"""
    
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database = "unavailable"
    
    redis_client = await get_redis()
    
    return HealthResponse(
        status="healthy" if database == "connected" else "degraded",
        timestamp=datetime.utcnow(),
        database=database,
        redis="connected" if redis_client else "unavailable",
        api_version="1.0.0"
    )

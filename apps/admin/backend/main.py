from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging
import os

from shared.config.settings import settings
from shared.config.redis import init_redis
from apps.admin.backend.routers import subscriptions_router, forums_router, system_router

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_redis()
    yield


app = FastAPI(
    title="Community Platform Admin API",
    description="Back office API for subscriptions and forums",
    version="1.0.0",
    lifespan=lifespan
)

# Get allowed origins from environment variable or use defaults
allowed_origins = os.getenv("ADMIN_CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Simple admin authentication"""
    if credentials.credentials != settings.admin_secret:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials

app.include_router(
    subscriptions_router.router,
    prefix="/api/subscriptions",
    tags=["Subscriptions"],
    dependencies=[Depends(verify_admin_token)]
)

app.include_router(
    forums_router.router,
    prefix="/api/forums",
    tags=["Forums"],
    dependencies=[Depends(verify_admin_token)]
)

app.include_router(
    system_router.router,
    prefix="/api/system",
    tags=["System"]
)

@app.get("/")
async def root():
    return {
        "message": "Community Platform Admin API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "admin-api"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host or "0.0.0.0", port=int(settings.port or 8000))

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from typing import Any, List, Optional
from datetime import datetime
import logging

from shared.config.database import get_db
from shared.services.forum_service import ForumService
from shared.services.reply_tree import ReplyRecord, SkippedReply, build_forest, walk

logger = logging.getLogger(__name__)

router = APIRouter()


class ReplyCreateRequest(BaseModel):
    user_id: str
    content: str = Field(min_length=1, max_length=5000)
    parent_id: Optional[int] = None


class ReplyResponse(BaseModel):
    id: int
    post_id: int
    user_id: str
    parent_id: Optional[int]
    content: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ReplyTreeEntry(BaseModel):
    record: ReplyRecord
    depth: int
    child_ids: List[Any]


class ReplyTreeResponse(BaseModel):
    post_id: int
    root_ids: List[Any]
    replies: List[ReplyTreeEntry]  # pre-order, so a thread reads top to bottom
    total_count: int
    orphan_count: int
    skipped: List[SkippedReply]


def get_forum_service(db: AsyncSession = Depends(get_db)) -> ForumService:
    return ForumService(db)


@router.get("/posts/{post_id}/replies", response_model=ReplyTreeResponse)
async def get_post_replies(
    post_id: int,
    forum_service: ForumService = Depends(get_forum_service)
):
    """Replies of a post as a tree of top-level comments and nested answers"""
    post = await forum_service.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    records = await forum_service.get_reply_records(post_id)
    forest = build_forest(records)

    replies = [
        ReplyTreeEntry(
            record=node.record,
            depth=depth,
            child_ids=[child.record.id for child in node.children]
        )
        for node, depth in walk(forest.roots)
    ]

    return ReplyTreeResponse(
        post_id=post_id,
        root_ids=[root.record.id for root in forest.roots],
        replies=replies,
        total_count=forest.total_count,
        orphan_count=forest.orphan_count,
        skipped=forest.skipped
    )


@router.post("/posts/{post_id}/replies", response_model=ReplyResponse, status_code=201)
async def create_post_reply(
    post_id: int,
    request: ReplyCreateRequest,
    forum_service: ForumService = Depends(get_forum_service)
):
    """Reply to a post, or to another reply of the same post"""
    post = await forum_service.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.is_locked:
        raise HTTPException(status_code=403, detail="Post is locked")

    if request.parent_id is not None:
        parent = await forum_service.get_reply(request.parent_id)
        if not parent or parent.post_id != post_id:
            raise HTTPException(status_code=404, detail="Parent reply not found")

    reply = await forum_service.create_reply(post, request.user_id, request.content, request.parent_id)
    logger.info(f"Reply {reply.id} created on post {post_id}")
    return reply

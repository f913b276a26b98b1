from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import logging

from shared.models.forum import ForumPost, ForumPostReply
from shared.models.notification import Notification
from shared.models.user import Profile
from .reply_tree import ReplyRecord

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "משתמש"


class ForumService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_post(self, post_id: int) -> Optional[ForumPost]:
        result = await self.session.execute(
            select(ForumPost).where(ForumPost.id == post_id)
        )
        return result.scalar_one_or_none()

    async def get_reply(self, reply_id: int) -> Optional[ForumPostReply]:
        result = await self.session.execute(
            select(ForumPostReply).where(ForumPostReply.id == reply_id)
        )
        return result.scalar_one_or_none()

    async def get_reply_records(self, post_id: int) -> List[ReplyRecord]:
        """All replies of a post, nested ones included, with author profiles attached"""
        result = await self.session.execute(
            select(ForumPostReply, Profile)
            .outerjoin(Profile, Profile.user_id == ForumPostReply.user_id)
            .where(ForumPostReply.post_id == post_id)
            .order_by(ForumPostReply.created_at.asc())
        )

        records = []
        for reply, profile in result.all():
            if not profile:
                logger.warning(f"No profile found for reply {reply.id} (user_id={reply.user_id})")
            records.append(ReplyRecord(
                id=reply.id,
                parent_id=reply.parent_id,
                created_at=reply.created_at,
                content=reply.content,
                author=self._author(reply.user_id, profile)
            ))
        return records

    async def create_reply(self, post: ForumPost, user_id: str, content: str, parent_id: Optional[int] = None) -> ForumPostReply:
        reply = ForumPostReply(
            post_id=post.id,
            user_id=user_id,
            content=content,
            parent_id=parent_id
        )
        self.session.add(reply)

        # Only top-level replies count towards the post's reply counter
        if parent_id is None:
            post.replies_count = (post.replies_count or 0) + 1

        await self.session.commit()
        await self.session.refresh(reply)

        try:
            await self.notify_reply(post, reply)
        except Exception as e:
            await self.session.rollback()
            logger.warning(f"Could not send reply notification for reply {reply.id}: {e}")

        return reply

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        result = await self.session.execute(
            select(Profile).where(Profile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def notify_reply(self, post: ForumPost, reply: ForumPostReply) -> Optional[Notification]:
        """
        Tell the author of the replied-to comment (or of the post, for a
        top-level reply) that someone answered. Nobody is notified about
        their own replies.
        """
        if reply.parent_id is not None:
            parent = await self.get_reply(reply.parent_id)
            recipient = parent.user_id if parent else None
        else:
            recipient = post.user_id

        if not recipient or recipient == reply.user_id:
            return None

        author = self._author(reply.user_id, await self.get_profile(reply.user_id))
        if reply.parent_id is not None:
            title = "תגובה לתגובה שלך"
            message = f"{author['display_name']} הגיב על התגובה שלך"
        else:
            title = "תגובה על הפוסט שלך"
            message = f"{author['display_name']} הגיב על הפוסט \"{post.title or 'פוסט'}\""

        notification = Notification(
            user_id=recipient,
            type="forum_reply",
            title=title,
            message=message,
            link=f"/forums/{post.forum_id}/posts/{post.id}" if post.forum_id else "/forums",
            is_read=False
        )
        self.session.add(notification)
        await self.session.commit()

        logger.info(f"Notified {recipient} about reply {reply.id}")
        return notification

    @staticmethod
    def _author(user_id: str, profile: Optional[Profile]) -> dict:
        if not profile:
            return {"user_id": user_id, "display_name": DEFAULT_DISPLAY_NAME, "avatar_url": None}

        display_name = profile.display_name or profile.first_name or profile.nickname or DEFAULT_DISPLAY_NAME
        return {
            "user_id": profile.user_id,
            "display_name": display_name,
            "avatar_url": profile.avatar_url
        }

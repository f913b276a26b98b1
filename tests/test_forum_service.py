import asyncio
from types import SimpleNamespace

import pytest

from shared.models.notification import Notification
from shared.services.forum_service import ForumService


class FakeSession:
    def __init__(self):
        self.added = []
        self.commits = 0
        self.rollbacks = 0

    def add(self, obj):
        self.added.append(obj)

    async def commit(self):
        self.commits += 1

    async def refresh(self, obj):
        if obj.id is None:
            obj.id = len(self.added)

    async def rollback(self):
        self.rollbacks += 1


class InMemoryForumService(ForumService):
    """ForumService with lookups served from dicts instead of queries"""

    def __init__(self, replies=(), profiles=()):
        super().__init__(FakeSession())
        self.replies = {reply.id: reply for reply in replies}
        self.profiles = {profile.user_id: profile for profile in profiles}

    async def get_reply(self, reply_id):
        return self.replies.get(reply_id)

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)


def profile(user_id, display_name=None, first_name=None, nickname=None):
    return SimpleNamespace(user_id=user_id, display_name=display_name, first_name=first_name, nickname=nickname, avatar_url=None)


@pytest.fixture
def post():
    return SimpleNamespace(id=1, forum_id=5, user_id="owner", title="שאלה על מנויים", replies_count=0)


def notifications(service):
    return [obj for obj in service.session.added if isinstance(obj, Notification)]


def test_top_level_reply_notifies_post_author(post):
    service = InMemoryForumService(profiles=[profile("dana", first_name="Dana")])

    reply = asyncio.run(service.create_reply(post, "dana", "great post"))

    assert post.replies_count == 1
    [notification] = notifications(service)
    assert notification.user_id == "owner"
    assert notification.type == "forum_reply"
    assert notification.title == "תגובה על הפוסט שלך"
    assert notification.message == 'Dana הגיב על הפוסט "שאלה על מנויים"'
    assert notification.link == "/forums/5/posts/1"
    assert reply.user_id == "dana"


def test_nested_reply_notifies_parent_author(post):
    parent = SimpleNamespace(id=10, post_id=1, user_id="yossi")
    service = InMemoryForumService(replies=[parent], profiles=[profile("dana", nickname="dd")])

    asyncio.run(service.create_reply(post, "dana", "agreed", parent_id=10))

    assert post.replies_count == 0
    [notification] = notifications(service)
    assert notification.user_id == "yossi"
    assert notification.title == "תגובה לתגובה שלך"
    assert notification.message == "dd הגיב על התגובה שלך"


def test_reply_without_profile_uses_default_name(post):
    service = InMemoryForumService()

    asyncio.run(service.create_reply(post, "ghost", "hi"))

    [notification] = notifications(service)
    assert notification.message.startswith("משתמש ")


def test_no_notification_for_own_post(post):
    service = InMemoryForumService()

    asyncio.run(service.create_reply(post, "owner", "bump"))

    assert notifications(service) == []
    assert post.replies_count == 1


def test_no_notification_for_reply_to_own_comment(post):
    parent = SimpleNamespace(id=10, post_id=1, user_id="dana")
    service = InMemoryForumService(replies=[parent])

    asyncio.run(service.create_reply(post, "dana", "also", parent_id=10))

    assert notifications(service) == []


def test_failed_notification_keeps_the_reply(post):
    class BrokenProfiles(InMemoryForumService):
        async def get_profile(self, user_id):
            raise RuntimeError("profiles table unavailable")

    service = BrokenProfiles()

    reply = asyncio.run(service.create_reply(post, "dana", "hello"))

    assert reply.content == "hello"
    assert notifications(service) == []
    assert service.session.rollbacks == 1

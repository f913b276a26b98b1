from .user import Profile, Role
from .settings import PlatformSetting
from .subscription import Subscription, Payment
from .notification import Notification
from .forum import Forum, ForumPost, ForumPostReply

__all__ = [
    "Profile",
    "Role",
    "PlatformSetting",
    "Subscription",
    "Payment",
    "Notification",
    "Forum",
    "ForumPost",
    "ForumPostReply"
]

from .user import User
from .session import Session
from .friend import FriendRequest, Friendship
from .post import Post
from .comment import Comment
from .data_point import DataPoint
from .competition import Competition, CompetitionEntry, Membership
from .link import Link, LinkKind

__all__ = [
    "User",
    "Session",
    "FriendRequest",
    "Friendship",
    "Post",
    "Comment",
    "DataPoint",
    "Competition",
    "CompetitionEntry",
    "Membership",
    "Link",
    "LinkKind",
]

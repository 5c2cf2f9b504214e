from datetime import datetime
from typing import Optional
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field, UniqueConstraint

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"


class FriendRequest(SQLModel, table=True):
    __tablename__ = "friend_requests"
    # At most one pending request per ordered pair; answered requests are kept
    __table_args__ = (
        Index(
            "unique_pending_request",
            "from_id",
            "to_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    from_id: int = Field(index=True)
    to_id: int = Field(index=True)
    status: str = Field(default=PENDING)  # pending, accepted, rejected
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Friendship(SQLModel, table=True):
    """Unordered pair of friends, stored with user1_id < user2_id."""
    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("user1_id", "user2_id", name="unique_friend_pair"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user1_id: int = Field(index=True)
    user2_id: int = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

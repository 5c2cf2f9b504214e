from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class LinkKind(str, Enum):
    """Kind of item a link points at; each kind has its own id space."""
    POST = "post"
    COMMENT = "comment"
    DATA = "data"
    COMPETITION = "competition"


class Link(SQLModel, table=True):
    __tablename__ = "links"
    __table_args__ = (UniqueConstraint("user_id", "kind", "item_id", name="unique_user_item"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    kind: LinkKind = Field(index=True)
    item_id: int = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class Competition(SQLModel, table=True):
    """Time-bounded competition. Deleted competitions are removed outright,
    so the unique name only clashes with competitions that still exist."""
    __tablename__ = "competitions"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    owner_id: int = Field(index=True)
    end_date: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CompetitionEntry(SQLModel, table=True):
    """One data point contributed to a competition; entry id gives the order."""
    __tablename__ = "competition_entries"

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(index=True)
    data_point_id: int = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Membership(SQLModel, table=True):
    __tablename__ = "memberships"
    __table_args__ = (UniqueConstraint("competition_id", "user_id", name="unique_competition_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(index=True)
    user_id: int = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

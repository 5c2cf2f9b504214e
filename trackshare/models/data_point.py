import datetime as dt
from typing import Optional
from sqlmodel import SQLModel, Field


class DataPoint(SQLModel, table=True):
    __tablename__ = "data_points"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    date: dt.date = Field(index=True)
    score: float
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)

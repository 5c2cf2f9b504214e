from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Post(SQLModel, table=True):
    __tablename__ = "posts"

    id: Optional[int] = Field(default=None, primary_key=True)
    author_id: int = Field(index=True)
    content: str
    # Free-form display options, e.g. {"backgroundColor": "#ffeeaa"}
    options: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

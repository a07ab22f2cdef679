from __future__ import annotations
from typing import Optional
from sqlmodel import SQLModel, Field

class Artist(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=120, index=True)

class Album(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=160, index=True)
    artist_id: int = Field(foreign_key="artist.id", index=True)

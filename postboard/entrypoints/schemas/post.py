from typing import Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


class TextI(BaseModel):
    text: str

    @field_validator("text", mode="before")
    @classmethod
    def text_required(cls, value):
        if value is None or not str(value).strip():
            raise ValueError("Text is required")
        return str(value).strip()


class Timestamped(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_timezone_aware_utc(cls, value):
        if isinstance(value, datetime):
            dt = value
        else:
            dt = datetime.fromisoformat(str(value))

        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)


# Posts
class PostI(TextI):
    pass


# Likes
class Like(Timestamped):
    pass


# Comments
class CommentI(TextI):
    pass


class Comment(Timestamped):
    text: str
    name: str
    avatar: Optional[str] = None


class Post(Timestamped):
    text: str
    name: str
    avatar: Optional[str] = None
    likes: list[Like] = []
    comments: list[Comment] = []

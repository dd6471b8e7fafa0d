from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from postboard.domain import exceptions


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def parse_id(value) -> Optional[str]:
    """
    Normalize an identifier to its canonical hex form.
    Returns None when the value is not a well-formed identifier.
    """
    try:
        return uuid.UUID(str(value)).hex
    except ValueError:
        return None


def require_text(text: Optional[str], field_name: str = "text") -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise exceptions.ValidationError(field_name, "Text is required")
    return cleaned


# --- Value objects ---


@dataclass(eq=True, frozen=True)
class Profile:
    user_id: str
    name: str
    avatar: Optional[str] = None


# --- Entities ---


@dataclass(eq=True, frozen=True)
class Like:
    id: str
    user_id: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=True, frozen=True)
class Comment:
    id: str
    user_id: str
    text: str
    name: str
    avatar: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


# --- Aggregates ---


@dataclass(eq=False)
class UserAggregate:
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    password_hash: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    events: list = field(default_factory=list, repr=False)

    @property
    def profile(self) -> Profile:
        return Profile(user_id=self.id, name=self.name, avatar=self.avatar)


@dataclass(eq=False)
class PostAggregate:
    id: str
    user_id: str
    text: str
    name: str
    avatar: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    likes: List[Like] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    version: int = 0
    events: list = field(default_factory=list, repr=False)

    @classmethod
    def create(cls, text: str, author: Profile, post_id: Optional[str] = None) -> PostAggregate:
        return cls(
            id=post_id or new_id(),
            user_id=author.user_id,
            text=require_text(text),
            name=author.name,
            avatar=author.avatar,
        )

    def ensure_owned_by(self, user_id: str) -> None:
        if self.user_id != user_id:
            raise exceptions.Unauthorized("User not authorized")

    # Likes

    def find_like(self, user_id: str) -> Optional[Like]:
        return next((like for like in self.likes if like.user_id == user_id), None)

    def like(self, user_id: str) -> Like:
        if self.find_like(user_id) is not None:
            raise exceptions.DuplicateAction("Post already liked")
        like = Like(id=new_id(), user_id=user_id)
        self.likes.insert(0, like)
        return like

    def unlike(self, user_id: str) -> Like:
        like = self.find_like(user_id)
        if like is None:
            raise exceptions.InvalidState("Post has not yet been liked")
        self.likes.remove(like)
        return like

    # Comments

    def find_comment(self, comment_id: str) -> Optional[Comment]:
        return next((c for c in self.comments if c.id == comment_id), None)

    def add_comment(self, text: str, author: Profile) -> Comment:
        comment = Comment(
            id=new_id(),
            user_id=author.user_id,
            text=require_text(text),
            name=author.name,
            avatar=author.avatar,
        )
        self.comments.insert(0, comment)
        return comment

    def remove_comment(self, comment_id: str, user_id: str) -> Comment:
        comment = self.find_comment(comment_id)
        if comment is None:
            raise exceptions.CommentNotFound()
        if comment.user_id != user_id:
            raise exceptions.Unauthorized("User not authorized")
        self.comments = [c for c in self.comments if c.id != comment_id]
        return comment

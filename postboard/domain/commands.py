from dataclasses import dataclass
from typing import Optional


class Command:
    """Marker base class for commands."""


@dataclass
class RegisterUser(Command):
    email: str
    password: str
    name: str
    avatar: Optional[str] = None


@dataclass
class CreatePost(Command):
    user_id: str
    text: str
    post_id: Optional[str] = None


@dataclass
class DeletePost(Command):
    post_id: str
    user_id: str


@dataclass
class LikePost(Command):
    post_id: str
    user_id: str


@dataclass
class UnlikePost(Command):
    post_id: str
    user_id: str


@dataclass
class AddComment(Command):
    post_id: str
    user_id: str
    text: str


@dataclass
class DeleteComment(Command):
    post_id: str
    comment_id: str
    user_id: str

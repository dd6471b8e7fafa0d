from dataclasses import dataclass


class Event:
    """Marker base class for domain events."""


@dataclass
class UserRegistered(Event):
    user_id: str
    email: str


@dataclass
class PostCreated(Event):
    post_id: str
    user_id: str


@dataclass
class PostDeleted(Event):
    post_id: str
    user_id: str


@dataclass
class PostLiked(Event):
    post_id: str
    user_id: str


@dataclass
class PostUnliked(Event):
    post_id: str
    user_id: str


@dataclass
class CommentAdded(Event):
    post_id: str
    comment_id: str
    user_id: str


@dataclass
class CommentDeleted(Event):
    post_id: str
    comment_id: str
    user_id: str

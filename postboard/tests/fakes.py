from __future__ import annotations

import copy
from typing import Dict, Iterable, Optional

from postboard.domain import exceptions
from postboard.domain.model import PostAggregate, UserAggregate
from postboard.service_layer import repository

ALICE_ID = "a" * 32
BOB_ID = "b" * 32


class FakeUserRepository(repository.AbstractUserRepository):
    def __init__(self, users: Iterable[UserAggregate] | None = None) -> None:
        super().__init__()
        self._users: Dict[str, UserAggregate] = {}
        for u in users or []:
            self._users[u.id] = u

    def _add(self, user: UserAggregate) -> None:
        self._users[user.id] = user

    def _get(self, user_id: str) -> Optional[UserAggregate]:
        return self._users.get(user_id)

    def _get_by_email(self, email: str) -> Optional[UserAggregate]:
        return next((u for u in self._users.values() if u.email == email), None)


class FakePostRepository(repository.AbstractPostRepository):
    """
    Stores detached snapshots so callers only see what was saved, and
    enforces the same version check as the SQL repository.
    """

    def __init__(self, posts: Iterable[PostAggregate] | None = None) -> None:
        super().__init__()
        self._posts: Dict[str, PostAggregate] = {}
        for p in posts or []:
            self._posts[p.id] = self._snapshot(p)

    def _add(self, post: PostAggregate) -> None:
        self._posts[post.id] = self._snapshot(post)

    def _get(self, post_id: str) -> Optional[PostAggregate]:
        stored = self._posts.get(post_id)
        return self._snapshot(stored) if stored else None

    def _save(self, post: PostAggregate) -> None:
        self._check_version(post)
        post.version += 1
        self._posts[post.id] = self._snapshot(post)

    def _delete(self, post: PostAggregate) -> None:
        self._check_version(post)
        del self._posts[post.id]

    def _list_all(self) -> Iterable[PostAggregate]:
        posts = sorted(self._posts.values(), key=lambda p: p.created_at, reverse=True)
        return [self._snapshot(p) for p in posts]

    def _check_version(self, post: PostAggregate) -> None:
        stored = self._posts.get(post.id)
        if stored is None or stored.version != post.version:
            raise exceptions.ConcurrencyConflict(f"Post {post.id} was modified concurrently")

    @staticmethod
    def _snapshot(post: PostAggregate) -> PostAggregate:
        clone = copy.deepcopy(post)
        clone.events = []
        return clone

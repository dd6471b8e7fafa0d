from __future__ import annotations

import abc
from typing import Iterable, Optional, Set

from postboard.domain.model import PostAggregate, UserAggregate


class AbstractUserRepository(abc.ABC):
    def __init__(self) -> None:
        self.seen: Set[UserAggregate] = set()

    def add(self, user: UserAggregate) -> None:
        self._add(user)
        self.seen.add(user)

    def get(self, user_id: str) -> Optional[UserAggregate]:
        user = self._get(user_id)
        if user:
            self.seen.add(user)
        return user

    def get_by_email(self, email: str) -> Optional[UserAggregate]:
        user = self._get_by_email(email)
        if user:
            self.seen.add(user)
        return user

    @abc.abstractmethod
    def _add(self, user: UserAggregate) -> None: ...

    @abc.abstractmethod
    def _get(self, user_id: str) -> Optional[UserAggregate]: ...

    @abc.abstractmethod
    def _get_by_email(self, email: str) -> Optional[UserAggregate]: ...


class AbstractPostRepository(abc.ABC):
    """
    Whole-aggregate persistence port for posts.

    ``save`` and ``delete`` are conditional on the version the aggregate was
    loaded with; implementations raise ``ConcurrencyConflict`` when the stored
    version moved on, and bump ``post.version`` after a successful save.
    """

    def __init__(self) -> None:
        self.seen: Set[PostAggregate] = set()

    def add(self, post: PostAggregate) -> None:
        self._add(post)
        self.seen.add(post)

    def get(self, post_id: str) -> Optional[PostAggregate]:
        post = self._get(post_id)
        if post:
            self.seen.add(post)
        return post

    def save(self, post: PostAggregate) -> None:
        """Persist mutations on an existing aggregate."""
        self._save(post)
        self.seen.add(post)

    def delete(self, post: PostAggregate) -> None:
        self._delete(post)
        self.seen.add(post)

    def list_all(self) -> Iterable[PostAggregate]:
        """All posts, newest first."""
        posts = list(self._list_all())
        self.seen.update(posts)
        return posts

    @abc.abstractmethod
    def _add(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _get(self, post_id: str) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    def _save(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _delete(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _list_all(self) -> Iterable[PostAggregate]: ...

from __future__ import annotations

import abc
import logging
import time
import weakref
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from postboard.db import get_session_factory, metadata
from postboard.domain import exceptions
from postboard.service_layer import repository
from postboard.adapters import repository as sql_repo

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(abc.ABC):
    users: repository.AbstractUserRepository
    posts: repository.AbstractPostRepository
    # time.monotonic() value after which nothing may be committed
    deadline: Optional[float] = None

    def __enter__(self) -> "AbstractUnitOfWork":
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    def collect_new_events(self) -> List:
        events = []
        for repo in (getattr(self, "users", None), getattr(self, "posts", None)):
            if repo is None:
                continue
            for agg in repo.seen:
                events.extend(agg.events)
                agg.events.clear()
        return events

    def commit(self) -> None:
        if self.deadline is not None and time.monotonic() > self.deadline:
            logger.warning("Deadline passed before commit, rolling back")
            raise exceptions.StoreTimeout()
        self._commit()

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    _initialized_binds: "weakref.WeakSet" = weakref.WeakSet()

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self.session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        if self.session_factory is None:
            self.session_factory = get_session_factory()
        self.session = self.session_factory()
        try:
            self._ensure_schema()
        except SQLAlchemyError as exc:
            self._close()
            logger.error("Persistence failure on connect: %s", exc)
            raise exceptions.StoreUnavailable("Persistence store unavailable") from exc
        self.users = sql_repo.SqlAlchemyUserRepository(self.session)
        self.posts = sql_repo.SqlAlchemyPostRepository(self.session)
        return super().__enter__()

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        except SQLAlchemyError as rollback_exc:
            logger.error("Persistence failure on rollback: %s", rollback_exc)
            raise exceptions.StoreUnavailable("Persistence store unavailable") from rollback_exc
        finally:
            self._close()
        if exc_type is not None and issubclass(exc_type, SQLAlchemyError):
            logger.error("Persistence failure: %s", exc)
            raise exceptions.StoreUnavailable("Persistence store unavailable") from exc

    def _commit(self) -> None:
        if self.session:
            self.session.commit()

    def rollback(self) -> None:
        if self.session:
            self.session.rollback()

    def _close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None

    def _ensure_schema(self) -> None:
        """
        Guarantee tables exist for the configured database (helpful for SQLite dev/test).
        Runs once per engine.
        """
        if self.session is None:
            return
        bind = self.session.get_bind()
        if bind in self._initialized_binds:
            return
        metadata.create_all(bind=bind)
        self._initialized_binds.add(bind)


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self,
        users_repo: repository.AbstractUserRepository,
        posts_repo: repository.AbstractPostRepository,
    ) -> None:
        self.users = users_repo
        self.posts = posts_repo
        self.committed = False
        self.commits = 0

    def _commit(self) -> None:
        self.committed = True
        self.commits += 1

    def rollback(self) -> None:
        pass

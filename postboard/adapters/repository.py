from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from postboard.db import post_table, user_table
from postboard.domain import exceptions, model
from postboard.service_layer import repository as abs_repo


def _as_utc(value) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    if value.tzinfo is None:
        # SQLite drops tzinfo; stored values are always UTC
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlAlchemyUserRepository(abs_repo.AbstractUserRepository):
    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session

    def _add(self, user: model.UserAggregate) -> None:
        self.session.execute(
            user_table.insert().values(
                id=user.id,
                email=user.email,
                name=user.name,
                avatar=user.avatar,
                password=user.password_hash,
                created_at=user.created_at,
            )
        )

    def _get(self, user_id: str) -> Optional[model.UserAggregate]:
        stmt = select(user_table).where(user_table.c.id == user_id)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._row_to_agg(row)

    def _get_by_email(self, email: str) -> Optional[model.UserAggregate]:
        stmt = select(user_table).where(user_table.c.email == email)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._row_to_agg(row)

    def _row_to_agg(self, row) -> model.UserAggregate:
        return model.UserAggregate(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            avatar=row.get("avatar"),
            password_hash=row.get("password"),
            created_at=_as_utc(row["created_at"]),
        )


class SqlAlchemyPostRepository(abs_repo.AbstractPostRepository):
    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session

    def _add(self, post: model.PostAggregate) -> None:
        self.session.execute(post_table.insert().values(id=post.id, **self._document(post)))

    def _get(self, post_id: str) -> Optional[model.PostAggregate]:
        stmt = select(post_table).where(post_table.c.id == post_id)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._hydrate_post(row)

    def _save(self, post: model.PostAggregate) -> None:
        values = self._document(post)
        values["version"] = post.version + 1
        result = self.session.execute(
            post_table.update()
            .where(post_table.c.id == post.id, post_table.c.version == post.version)
            .values(**values)
        )
        if result.rowcount != 1:
            raise exceptions.ConcurrencyConflict(f"Post {post.id} was modified concurrently")
        post.version += 1

    def _delete(self, post: model.PostAggregate) -> None:
        result = self.session.execute(
            post_table.delete().where(
                post_table.c.id == post.id, post_table.c.version == post.version
            )
        )
        if result.rowcount != 1:
            raise exceptions.ConcurrencyConflict(f"Post {post.id} was modified concurrently")

    def _list_all(self) -> Iterable[model.PostAggregate]:
        stmt = select(post_table).order_by(post_table.c.created_at.desc(), post_table.c.id)
        rows = self.session.execute(stmt).mappings().all()
        return [self._hydrate_post(row) for row in rows]

    def _document(self, post: model.PostAggregate) -> dict:
        return {
            "user_id": post.user_id,
            "text": post.text,
            "name": post.name,
            "avatar": post.avatar,
            "created_at": post.created_at,
            "version": post.version,
            "likes": [
                {"id": like.id, "user_id": like.user_id, "created_at": like.created_at.isoformat()}
                for like in post.likes
            ],
            "comments": [
                {
                    "id": comment.id,
                    "user_id": comment.user_id,
                    "text": comment.text,
                    "name": comment.name,
                    "avatar": comment.avatar,
                    "created_at": comment.created_at.isoformat(),
                }
                for comment in post.comments
            ],
        }

    def _hydrate_post(self, row) -> model.PostAggregate:
        return model.PostAggregate(
            id=row["id"],
            user_id=row["user_id"],
            text=row["text"],
            name=row["name"],
            avatar=row.get("avatar"),
            created_at=_as_utc(row["created_at"]),
            version=row["version"],
            likes=[
                model.Like(id=l["id"], user_id=l["user_id"], created_at=_as_utc(l["created_at"]))
                for l in row["likes"] or []
            ],
            comments=[
                model.Comment(
                    id=c["id"],
                    user_id=c["user_id"],
                    text=c["text"],
                    name=c["name"],
                    avatar=c.get("avatar"),
                    created_at=_as_utc(c["created_at"]),
                )
                for c in row["comments"] or []
            ],
        )

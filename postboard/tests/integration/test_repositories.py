from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from postboard.adapters.repository import SqlAlchemyPostRepository, SqlAlchemyUserRepository
from postboard.db import metadata, post_table
from postboard.domain import exceptions, model


@pytest.fixture
def session():
    engine = create_engine("sqlite:///:memory:", future=True)
    metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    try:
        with Session() as sess:
            yield sess
    finally:
        metadata.drop_all(engine)


@pytest.fixture
def author(session) -> model.UserAggregate:
    user = model.UserAggregate(
        id=model.new_id(), email="a@example.com", name="Alice", avatar="http://img/a", password_hash="pw"
    )
    SqlAlchemyUserRepository(session).add(user)
    session.commit()
    return user


def test_user_repository_roundtrip(session, author):
    repo = SqlAlchemyUserRepository(session)

    fetched = repo.get_by_email("a@example.com")
    assert fetched is not None
    assert (fetched.id, fetched.name, fetched.avatar, fetched.password_hash) == (
        author.id, "Alice", "http://img/a", "pw"
    )
    assert fetched.created_at.tzinfo is not None
    assert repo.get(model.new_id()) is None


def test_post_repository_roundtrip_with_embedded_collections(session, author):
    repo = SqlAlchemyPostRepository(session)
    post = model.PostAggregate.create(text="hi", author=author.profile)
    repo.add(post)
    session.commit()

    loaded = repo.get(post.id)
    loaded.like(author.id)
    comment = loaded.add_comment("welcome!", author.profile)
    repo.save(loaded)
    session.commit()

    refreshed = SqlAlchemyPostRepository(session).get(post.id)
    assert refreshed.text == "hi"
    assert refreshed.version == 1
    assert [l.user_id for l in refreshed.likes] == [author.id]
    assert refreshed.comments == [comment]
    assert refreshed.created_at == post.created_at


def test_post_repository_rejects_stale_save(session, author):
    repo = SqlAlchemyPostRepository(session)
    post = model.PostAggregate.create(text="hi", author=author.profile)
    repo.add(post)
    session.commit()

    stale = repo.get(post.id)
    # Another writer bumps the version behind our back
    session.execute(post_table.update().where(post_table.c.id == post.id).values(version=1))
    session.commit()

    stale.like(author.id)
    with pytest.raises(exceptions.ConcurrencyConflict):
        repo.save(stale)
    with pytest.raises(exceptions.ConcurrencyConflict):
        repo.delete(stale)


def test_post_repository_delete(session, author):
    repo = SqlAlchemyPostRepository(session)
    post = model.PostAggregate.create(text="bye", author=author.profile)
    repo.add(post)
    session.commit()

    repo.delete(repo.get(post.id))
    session.commit()

    assert repo.get(post.id) is None


def test_post_repository_lists_newest_first(session, author):
    repo = SqlAlchemyPostRepository(session)
    now = datetime.now(timezone.utc)
    for offset, text in [(3, "oldest"), (1, "newest"), (2, "middle")]:
        post = model.PostAggregate.create(text=text, author=author.profile)
        post.created_at = now - timedelta(minutes=offset)
        repo.add(post)
    session.commit()

    assert [p.text for p in repo.list_all()] == ["newest", "middle", "oldest"]

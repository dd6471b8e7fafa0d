from __future__ import annotations

import logging
from typing import Callable, List, Tuple, TypeVar

from postboard.domain import commands, events, exceptions, model
from postboard.service_layer import unit_of_work

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --- Command handlers ---


def register_user(
    cmd: commands.RegisterUser,
    uow: unit_of_work.AbstractUnitOfWork,
    hash_password: Callable[[str], str],
) -> str:
    name = model.require_text(cmd.name, "name")
    with uow:
        if uow.users.get_by_email(cmd.email):
            raise exceptions.UserExists(f"User with email {cmd.email} already exists")
        user = model.UserAggregate(
            id=model.new_id(),
            email=cmd.email,
            name=name,
            avatar=cmd.avatar,
            password_hash=hash_password(cmd.password),
        )
        uow.users.add(user)
        uow.commit()
    user.events.append(events.UserRegistered(user_id=user.id, email=user.email))
    return user.id


def create_post(cmd: commands.CreatePost, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    text = model.require_text(cmd.text)
    with uow:
        author = _get_profile(uow, cmd.user_id)
        post = model.PostAggregate.create(text=text, author=author, post_id=cmd.post_id)
        uow.posts.add(post)
        uow.commit()
    post.events.append(events.PostCreated(post_id=post.id, user_id=post.user_id))
    return post


def delete_post(
    cmd: commands.DeletePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> str:
    def work() -> model.PostAggregate:
        post = _get_post(uow, cmd.post_id)
        post.ensure_owned_by(cmd.user_id)
        uow.posts.delete(post)
        return post

    post = _with_conflict_retry(uow, retries, work)
    post.events.append(events.PostDeleted(post_id=post.id, user_id=cmd.user_id))
    return post.id


def like_post(
    cmd: commands.LikePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> List[model.Like]:
    def work() -> model.PostAggregate:
        post = _get_post(uow, cmd.post_id)
        post.like(cmd.user_id)
        uow.posts.save(post)
        return post

    post = _with_conflict_retry(uow, retries, work)
    post.events.append(events.PostLiked(post_id=post.id, user_id=cmd.user_id))
    return list(post.likes)


def unlike_post(
    cmd: commands.UnlikePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> List[model.Like]:
    def work() -> model.PostAggregate:
        post = _get_post(uow, cmd.post_id)
        post.unlike(cmd.user_id)
        uow.posts.save(post)
        return post

    post = _with_conflict_retry(uow, retries, work)
    post.events.append(events.PostUnliked(post_id=post.id, user_id=cmd.user_id))
    return list(post.likes)


def add_comment(
    cmd: commands.AddComment, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> List[model.Comment]:
    text = model.require_text(cmd.text)

    def work() -> Tuple[model.PostAggregate, model.Comment]:
        post = _get_post(uow, cmd.post_id)
        # Fresh lookup: the commenter's current profile, not the post author's snapshot
        author = _get_profile(uow, cmd.user_id)
        comment = post.add_comment(text, author)
        uow.posts.save(post)
        return post, comment

    post, comment = _with_conflict_retry(uow, retries, work)
    post.events.append(
        events.CommentAdded(post_id=post.id, comment_id=comment.id, user_id=cmd.user_id)
    )
    return list(post.comments)


def delete_comment(
    cmd: commands.DeleteComment, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    def work() -> Tuple[model.PostAggregate, str]:
        post = _get_post(uow, cmd.post_id)
        comment_id = model.parse_id(cmd.comment_id)
        if comment_id is None:
            raise exceptions.CommentNotFound()
        post.remove_comment(comment_id, cmd.user_id)
        uow.posts.save(post)
        return post, comment_id

    post, comment_id = _with_conflict_retry(uow, retries, work)
    post.events.append(
        events.CommentDeleted(post_id=post.id, comment_id=comment_id, user_id=cmd.user_id)
    )
    return post


# --- Event handlers ---


def log_event(event: events.Event, uow: unit_of_work.AbstractUnitOfWork):
    logger.info("%s: %s", type(event).__name__, event)


# --- Helpers ---


def _get_post(uow: unit_of_work.AbstractUnitOfWork, post_id: str) -> model.PostAggregate:
    # Malformed and unknown ids are reported the same way
    canonical_id = model.parse_id(post_id)
    post = uow.posts.get(canonical_id) if canonical_id else None
    if post is None:
        raise exceptions.PostNotFound()
    return post


def _get_profile(uow: unit_of_work.AbstractUnitOfWork, user_id: str) -> model.Profile:
    user = uow.users.get(user_id)
    if not user:
        raise exceptions.Unauthorized("User not found")
    return user.profile


def _with_conflict_retry(
    uow: unit_of_work.AbstractUnitOfWork, retries: int, work: Callable[[], T]
) -> T:
    """
    Run one read-modify-write inside a unit of work, re-running it from a
    fresh load when the store reports a stale version.
    """
    attempt = 0
    while True:
        try:
            with uow:
                result = work()
                uow.commit()
                return result
        except exceptions.ConcurrencyConflict:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning("Concurrent modification detected, retrying (attempt %d of %d)", attempt, retries)

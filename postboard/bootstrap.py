from __future__ import annotations

from functools import partial
from typing import Callable, Dict, List, Type

from postboard import security
from postboard.config import config
from postboard.domain import commands, events
from postboard.service_layer import handlers, unit_of_work
from postboard.service_layer.messagebus import MessageBus
from postboard.service_layer.unit_of_work import SqlAlchemyUnitOfWork


def bootstrap(
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    hash_password: Callable[[str], str] | None = None,
    conflict_retries: int | None = None,
) -> MessageBus:
    uow = uow or SqlAlchemyUnitOfWork()
    hash_password = hash_password or security.get_password_hash
    retries = config.CONFLICT_RETRIES if conflict_retries is None else conflict_retries

    command_handlers: Dict[Type[commands.Command], Callable] = {
        commands.RegisterUser: partial(handlers.register_user, uow=uow, hash_password=hash_password),
        commands.CreatePost: partial(handlers.create_post, uow=uow),
        commands.DeletePost: partial(handlers.delete_post, uow=uow, retries=retries),
        commands.LikePost: partial(handlers.like_post, uow=uow, retries=retries),
        commands.UnlikePost: partial(handlers.unlike_post, uow=uow, retries=retries),
        commands.AddComment: partial(handlers.add_comment, uow=uow, retries=retries),
        commands.DeleteComment: partial(handlers.delete_comment, uow=uow, retries=retries),
    }

    event_handlers: Dict[Type[events.Event], List[Callable]] = {
        event_type: [partial(handlers.log_event, uow=uow)]
        for event_type in (
            events.UserRegistered,
            events.PostCreated,
            events.PostDeleted,
            events.PostLiked,
            events.PostUnliked,
            events.CommentAdded,
            events.CommentDeleted,
        )
    }

    return MessageBus(uow=uow, event_handlers=event_handlers, command_handlers=command_handlers)


def get_message_bus() -> MessageBus:
    """FastAPI dependency: a fresh unit of work and bus per request."""
    return bootstrap()

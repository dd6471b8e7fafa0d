from __future__ import annotations

from typing import List

from postboard.domain import exceptions, model
from postboard.service_layer import unit_of_work


def list_posts(uow: unit_of_work.AbstractUnitOfWork) -> List[model.PostAggregate]:
    with uow:
        return list(uow.posts.list_all())


def get_post(post_id: str, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    canonical_id = model.parse_id(post_id)
    with uow:
        post = uow.posts.get(canonical_id) if canonical_id else None
    if post is None:
        raise exceptions.PostNotFound()
    return post

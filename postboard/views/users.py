from __future__ import annotations

from postboard.domain import exceptions, model
from postboard.service_layer import unit_of_work


def get_profile(user_id: str, uow: unit_of_work.AbstractUnitOfWork) -> model.UserAggregate:
    with uow:
        user = uow.users.get(user_id)
    if user is None:
        raise exceptions.Unauthorized("User not found")
    return user

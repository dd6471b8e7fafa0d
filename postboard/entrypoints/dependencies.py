import asyncio
import logging
import time
from functools import partial
from typing import Any, Callable, Optional

from postboard.config import config
from postboard.domain import exceptions
from postboard.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


async def run_bounded(func: Callable[..., Any], *args, uow: Optional[AbstractUnitOfWork] = None) -> Any:
    """
    Run a blocking bus or view call in a worker thread, bounded by
    STORE_TIMEOUT_SECONDS.

    Reads are abandoned as soon as the timeout expires. For writes, pass the
    unit of work: it gets the deadline and refuses to commit past it, and the
    caller waits up to STORE_TIMEOUT_GRACE_SECONDS more for the worker to
    settle. The response then reflects what the store actually did. A 503
    means nothing was committed, unless the worker was still inside the commit
    when the grace period ran out.
    """
    timeout = config.STORE_TIMEOUT_SECONDS
    if uow is not None:
        uow.deadline = time.monotonic() + timeout
        timeout += config.STORE_TIMEOUT_GRACE_SECONDS
    try:
        return await asyncio.wait_for(asyncio.to_thread(partial(func, *args)), timeout=timeout)
    except asyncio.TimeoutError:
        name = getattr(func, "__name__", func)
        if uow is not None:
            logger.error("Store call %s still running after %.1fs, outcome unknown", name, timeout)
        else:
            logger.error("Store call %s timed out after %.1fs", name, timeout)
        raise exceptions.StoreTimeout()

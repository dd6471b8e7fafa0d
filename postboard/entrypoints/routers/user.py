import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from postboard.bootstrap import get_message_bus
from postboard.domain import commands
from postboard.entrypoints.dependencies import run_bounded
from postboard.entrypoints.schemas.user import UserProfile, UserRegister
from postboard.security import authenticate_user, create_access_token, get_current_user_id
from postboard.service_layer.messagebus import MessageBus
from postboard.views import users as user_views

router = APIRouter(prefix="/api", tags=["users"])

logger = logging.getLogger(__name__)


@router.post("/register", status_code=201)
async def register_user(user: UserRegister, bus: Annotated[MessageBus, Depends(get_message_bus)]):
    cmd = commands.RegisterUser(
        email=user.email,
        password=user.password,
        name=user.name,
        avatar=user.avatar,
    )
    user_id = await run_bounded(bus.dispatch, cmd, uow=bus.uow)
    return {"detail": "User created", "id": user_id}


@router.post("/token")
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    bus: Annotated[MessageBus, Depends(get_message_bus)],
):
    """OAuth2 password flow: the form's `username` field carries the email."""
    user = await run_bounded(authenticate_user, form_data.username, form_data.password, bus.uow)
    logger.info("Issued access token for user_id=%s", user.id)
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


@router.get("/user/me", response_model=UserProfile)
async def get_current_user_info(
    user_id: Annotated[str, Depends(get_current_user_id)],
    bus: Annotated[MessageBus, Depends(get_message_bus)],
):
    return await run_bounded(user_views.get_profile, user_id, bus.uow)

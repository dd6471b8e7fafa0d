from typing import Annotated

from fastapi import APIRouter, Depends

from postboard.bootstrap import get_message_bus
from postboard.domain import commands
from postboard.entrypoints.dependencies import run_bounded
from postboard.entrypoints.schemas.post import Comment, CommentI, Like, Post, PostI
from postboard.security import get_current_user_id
from postboard.service_layer.messagebus import MessageBus
from postboard.views import posts as post_views

router = APIRouter(prefix="/api/posts", tags=["posts"])

CurrentUser = Annotated[str, Depends(get_current_user_id)]
Bus = Annotated[MessageBus, Depends(get_message_bus)]


async def _dispatch(bus: MessageBus, cmd: commands.Command):
    return await run_bounded(bus.dispatch, cmd, uow=bus.uow)


@router.post("", response_model=Post, status_code=201)
async def create_post(post: PostI, user_id: CurrentUser, bus: Bus):
    return await _dispatch(bus, commands.CreatePost(user_id=user_id, text=post.text))


@router.get("", response_model=list[Post])
async def list_posts(user_id: CurrentUser, bus: Bus):
    return await run_bounded(post_views.list_posts, bus.uow)


@router.get("/{post_id}", response_model=Post)
async def get_post(post_id: str, user_id: CurrentUser, bus: Bus):
    return await run_bounded(post_views.get_post, post_id, bus.uow)


@router.delete("/{post_id}")
async def delete_post(post_id: str, user_id: CurrentUser, bus: Bus):
    await _dispatch(bus, commands.DeletePost(post_id=post_id, user_id=user_id))
    return {"detail": "Post removed"}


@router.put("/like/{post_id}", response_model=list[Like])
async def like_post(post_id: str, user_id: CurrentUser, bus: Bus):
    return await _dispatch(bus, commands.LikePost(post_id=post_id, user_id=user_id))


@router.put("/unlike/{post_id}", response_model=list[Like])
async def unlike_post(post_id: str, user_id: CurrentUser, bus: Bus):
    return await _dispatch(bus, commands.UnlikePost(post_id=post_id, user_id=user_id))


@router.put("/comment/{post_id}", response_model=list[Comment])
async def add_comment(post_id: str, comment: CommentI, user_id: CurrentUser, bus: Bus):
    return await _dispatch(
        bus, commands.AddComment(post_id=post_id, user_id=user_id, text=comment.text)
    )


@router.delete("/comment/{post_id}/{comment_id}", response_model=Post)
async def delete_comment(post_id: str, comment_id: str, user_id: CurrentUser, bus: Bus):
    return await _dispatch(
        bus,
        commands.DeleteComment(post_id=post_id, comment_id=comment_id, user_id=user_id),
    )

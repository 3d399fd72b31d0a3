"""
Session and user account endpoints.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Request, Response, status

from socialhub.api.deps import (
    CurrentUser,
    Identity,
    Orchestrator,
    OptionalUser,
    Sessions,
    clear_session_cookie,
    get_client_ip,
    set_session_cookie,
)
from socialhub.kernel.errors import AlreadyLoggedInError
from socialhub.schemas.auth import (
    UserCreate,
    UserLogin,
    UserMessageResponse,
    UserResponse,
    UserUpdate,
)
from socialhub.schemas.common import MessageResponse

router = APIRouter()


@router.get("/session", response_model=UserResponse)
async def get_session_user(current_user: CurrentUser):
    """Get the logged-in user."""
    return UserResponse.model_validate(current_user)


@router.get("/users", response_model=List[UserResponse])
async def get_users(identity: Identity):
    users = await identity.list_users()
    return [UserResponse.model_validate(user) for user in users]


@router.get("/users/{username}", response_model=UserResponse)
async def get_user(username: str, identity: Identity):
    user = await identity.get_user_by_username(username)
    return UserResponse.model_validate(user)


@router.post("/users", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    data: UserCreate,
    logged_in: OptionalUser,
    identity: Identity,
):
    """Register a new account. Only allowed while logged out."""
    if logged_in is not None:
        raise AlreadyLoggedInError()
    user = await identity.register_user(
        username=data.username,
        password=data.password,
        ip_address=get_client_ip(request),
    )
    return UserMessageResponse(msg="Created user successfully!", user=UserResponse.model_validate(user))


@router.patch("/users", response_model=UserMessageResponse)
async def update_user(
    request: Request,
    response: Response,
    data: UserUpdate,
    current_user: CurrentUser,
    identity: Identity,
    sessions: Sessions,
):
    """Change username and/or password. A new username re-issues the session cookie."""
    old_username = current_user.username
    user = await identity.update_user(
        current_user.id,
        username=data.username,
        password=data.password,
        ip_address=get_client_ip(request),
    )
    if user.username != old_username:
        set_session_cookie(response, sessions, user.id, user.username)
    return UserMessageResponse(msg="Updated user successfully!", user=UserResponse.model_validate(user))


@router.delete("/users", response_model=MessageResponse)
async def delete_user(
    request: Request,
    response: Response,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    """Delete the account with its posts, comments, lists, friendships and sharing records."""
    await orchestrator.delete_user(current_user.id, ip_address=get_client_ip(request))
    clear_session_cookie(response)
    return MessageResponse(msg="Deleted user!")


@router.post("/login", response_model=UserMessageResponse)
async def login(
    request: Request,
    response: Response,
    data: UserLogin,
    logged_in: OptionalUser,
    identity: Identity,
    sessions: Sessions,
):
    if logged_in is not None:
        raise AlreadyLoggedInError()
    user = await identity.authenticate(
        username=data.username,
        password=data.password,
        ip_address=get_client_ip(request),
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Username or password is incorrect.",
        )
    set_session_cookie(response, sessions, user.id, user.username)
    return UserMessageResponse(msg="Logged in!", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser,
    identity: Identity,
):
    await identity.log_logout(current_user.id, ip_address=get_client_ip(request))
    clear_session_cookie(response)
    return MessageResponse(msg="Logged out!")

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from .. import responses
from ..config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..dependencies import get_db, require_logged_out, require_user
from ..models import User
from ..services import auth

router = APIRouter(prefix="/api")


class Credentials(BaseModel):
    """Schema for registering and logging in."""
    username: str
    password: str


class UsernameUpdate(BaseModel):
    username: str


class PasswordUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")


@router.get("/session")
async def get_session_user(current_user: User = Depends(require_user)):
    """Get the logged-in user."""
    return responses.user(current_user)


@router.get("/users")
async def get_users(db: Session = Depends(get_db)):
    return [responses.user(user) for user in auth.get_users(db)]


@router.get("/users/{username}")
async def get_user(username: str, db: Session = Depends(get_db)):
    return responses.user(auth.get_user_by_username(db, username))


@router.post("/users", dependencies=[Depends(require_logged_out)])
async def create_user(credentials: Credentials, db: Session = Depends(get_db)):
    """Register a new user."""
    user = auth.create_user(db, credentials.username, credentials.password)
    return {"msg": "User created successfully!", "user": responses.user(user)}


@router.patch("/users/username")
async def update_username(
    update: UsernameUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    auth.update_username(db, current_user.id, update.username)
    return {"msg": "Username updated successfully!"}


@router.patch("/users/password")
async def update_password(
    update: PasswordUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    auth.update_password(db, current_user.id, update.current_password, update.new_password)
    return {"msg": "Password updated successfully!"}


@router.delete("/users")
async def delete_user(
    response: Response,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Delete the logged-in user and end their session."""
    auth.delete_user(db, current_user.id)
    response.delete_cookie(key=SESSION_COOKIE_NAME)
    return {"msg": "User deleted!"}


@router.post("/login")
async def login(
    credentials: Credentials,
    response: Response,
    db: Session = Depends(get_db)
):
    """Handle user login."""
    user = auth.authenticate_user(db, credentials.username, credentials.password)
    session = auth.create_session(db, user.id)

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session.session_token,
        httponly=True,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax"
    )
    return {"msg": "Logged in!"}


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """Handle user logout."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if session_token:
        auth.delete_session(db, session_token)

    response.delete_cookie(key=SESSION_COOKIE_NAME)
    return {"msg": "Logged out!"}

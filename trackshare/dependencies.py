from typing import Optional
from fastapi import Request, Depends
from sqlmodel import Session

from .database import get_session
from .errors import AlreadyLoggedInError, NotLoggedInError
from .models.user import User
from .services.auth import get_user_by_session_token
from .config import SESSION_COOKIE_NAME


def get_db(request: Request, db: Session = Depends(get_session)) -> Session:
    """Request session, also kept on the request for the error handlers."""
    request.state.db = db
    return db


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Get the current logged-in user from session cookie."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_token:
        return None

    return get_user_by_session_token(db, session_token)


async def require_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Require a logged-in user."""
    if not current_user:
        raise NotLoggedInError()
    return current_user


async def require_logged_out(
    current_user: Optional[User] = Depends(get_current_user)
) -> None:
    if current_user:
        raise AlreadyLoggedInError()

import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..config import SESSION_EXPIRE_DAYS
from ..errors import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidUsernameError,
    NotAllowedError,
    NotFoundError,
)
from ..models import User, Session as SessionModel

logger = logging.getLogger(__name__)

DELETED_USER = "DELETED_USER"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    # Bcrypt has a 72-byte limit on the password bytes
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    password_bytes = plain_password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def _assert_valid_username(username: str) -> str:
    username = username.strip()
    if not username:
        raise InvalidUsernameError()
    return username


def _commit_user(db: Session, user: User) -> User:
    # The unique index on username is the source of truth for duplicates
    username = user.username
    try:
        db.add(user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUsernameError(username) from e
    db.refresh(user)
    return user


def create_user(db: Session, username: str, password: str) -> User:
    """Create a new user."""
    username = _assert_valid_username(username)
    user = User(username=username, password_hash=hash_password(password))
    user = _commit_user(db, user)
    logger.info("Created user %s", user.id)
    return user


def get_users(db: Session) -> List[User]:
    return db.exec(select(User).order_by(User.username)).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User {0} does not exist!", user_id)
    return user


def get_user_by_username(db: Session, username: str) -> User:
    user = db.exec(select(User).where(User.username == username)).first()
    if not user:
        raise NotFoundError("User with username {0} does not exist!", username)
    return user


def ids_to_usernames(db: Session, ids: List[int]) -> List[str]:
    """Resolve user ids to usernames, keeping order. Unknown ids map to DELETED_USER."""
    if not ids:
        return []
    users = db.exec(select(User).where(User.id.in_(set(ids)))).all()
    by_id = {user.id: user.username for user in users}
    return [by_id.get(user_id, DELETED_USER) for user_id in ids]


def update_username(db: Session, user_id: int, username: str) -> User:
    user = get_user(db, user_id)
    user.username = _assert_valid_username(username)
    user.updated_at = datetime.utcnow()
    return _commit_user(db, user)


def update_password(db: Session, user_id: int, current_password: str, new_password: str) -> User:
    user = get_user(db, user_id)
    if not verify_password(current_password, user.password_hash):
        raise NotAllowedError("The given current password is wrong!")
    user.password_hash = hash_password(new_password)
    user.updated_at = datetime.utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a user together with their login sessions."""
    user = get_user(db, user_id)
    sessions = db.exec(select(SessionModel).where(SessionModel.user_id == user_id)).all()
    for session in sessions:
        db.delete(session)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)


def authenticate_user(db: Session, username: str, password: str) -> User:
    """Authenticate a user by username and password."""
    user = db.exec(select(User).where(User.username == username)).first()

    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return user


def generate_session_token() -> str:
    """Generate a secure random session token."""
    return secrets.token_urlsafe(32)


def create_session(db: Session, user_id: int) -> SessionModel:
    """Create a new session for a user."""
    session = SessionModel(
        user_id=user_id,
        session_token=generate_session_token(),
        expires_at=datetime.utcnow() + timedelta(days=SESSION_EXPIRE_DAYS)
    )

    db.add(session)
    db.commit()
    db.refresh(session)

    return session


def get_user_by_session_token(db: Session, session_token: str) -> Optional[User]:
    """Get user by session token if session is valid."""
    statement = select(SessionModel).where(SessionModel.session_token == session_token)
    session = db.exec(statement).first()

    if not session:
        return None

    # Check if session has expired
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None

    return db.get(User, session.user_id)


def delete_session(db: Session, session_token: str) -> bool:
    """Delete a session (logout)."""
    statement = select(SessionModel).where(SessionModel.session_token == session_token)
    session = db.exec(statement).first()

    if session:
        db.delete(session)
        db.commit()
        return True

    return False

"""
Authentication - owner identity for storage selection

Two pieces:
    - Session tokens: signed JWT (python-jose) carrying the owner identity
      in ``sub``, stored in an HTTP-only cookie. Requests without a valid
      token are anonymous and use local storage.
    - AuthState: in-process holder of the signed-in identity with change
      subscriptions, used by StorageContext to rebind storage on sign-in
      and sign-out.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from jobtracker.config import Settings, get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
COOKIE_NAME = "session_token"

AuthListener = Callable[[Optional[str]], None]


def create_session_token(user_id: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.token_expire_days)
    to_encode = {"sub": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str, settings: Optional[Settings] = None) -> Optional[str]:
    """Return the owner identity in a valid token, else None."""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub") or None


def verify_password(password: str, settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return password == settings.app_password


async def get_optional_user(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    return decode_session_token(token, request.app.state.settings)


async def get_current_user(user_id: Optional[str] = Depends(get_optional_user)) -> str:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user_id


class AuthState:
    """
    Current owner identity with change notifications.

    Listeners are called with the new identity (or None) only when it
    actually changes; re-signing in as the same user is a no-op.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id
        self._listeners: List[AuthListener] = []

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, user_id: str) -> None:
        self._set(user_id or None)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, user_id: Optional[str]) -> None:
        if user_id == self._user_id:
            return
        self._user_id = user_id
        logger.info(f"Auth state changed: {'signed in' if user_id else 'signed out'}")
        for listener in list(self._listeners):
            listener(user_id)

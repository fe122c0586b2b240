from fastapi import Depends, Header
from sqlalchemy.orm import Session

from habitsync import crud
from habitsync.db import get_db
from habitsync.errors import AuthenticationError, AuthNotConfiguredError, InactiveUserError
from habitsync.models.user import User
from habitsync.security import credentials_match
from habitsync.settings import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    """Deployment-wide gate; a no-op unless API_KEY is set."""
    if settings.API_KEY and not credentials_match(settings.API_KEY, x_api_key):
        raise AuthenticationError("Invalid API key")


def bearer_credential(authorization: str | None) -> str | None:
    scheme, _, credential = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> User:
    # The credential is opaque here: it is only hashed and looked up.
    credential = bearer_credential(authorization)
    if not credential:
        raise AuthenticationError("Missing bearer credential")
    try:
        user = crud.get_user_by_api_key(db, credential)
    except RuntimeError as exc:
        raise AuthNotConfiguredError() from exc
    if user is None:
        raise AuthenticationError("Invalid bearer credential")
    if not user.is_active:
        raise InactiveUserError()
    return user

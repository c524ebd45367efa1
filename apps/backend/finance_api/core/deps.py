from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.config import Settings, get_settings
from finance_api.core.database import get_db
from finance_api.core.errors import AuthError
from finance_api.services.auth_service import AuthService


bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> models.User:
    """Resolve the bearer token to a user.

    Tests may override this dependency to act as a fixed user.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required.")
    return auth.authenticate_token(credentials.credentials)

from __future__ import annotations

import datetime as dt
import logging
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.config import Settings
from finance_api.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from finance_api.core.security import TokenService, hash_password, verify_password
from finance_api.schemas import ProfileUpdate, RegisterIn


logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login, password reset and profile maintenance."""

    def __init__(self, db: Session, settings: Settings) -> None:
        self.db = db
        self.settings = settings
        self.tokens = TokenService(settings)

    def _by_email(self, email: str) -> models.User | None:
        return self.db.query(models.User).filter(models.User.email == email.strip().lower()).first()

    def register(self, payload: RegisterIn) -> tuple[models.User, str]:
        email = payload.email.strip().lower()
        if self._by_email(email):
            raise ConflictError("User already exists")
        user = models.User(
            email=email,
            password_hash=hash_password(payload.password, self.settings.BCRYPT_ROUNDS),
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("User already exists") from exc
        self.db.refresh(user)
        logger.info("user %s registered", user.id)
        return user, self.tokens.issue(user.id)

    def login(self, email: str, password: str) -> tuple[models.User, str]:
        user = self._by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("failed login for %s", email)
            raise AuthError("Invalid credentials")
        return user, self.tokens.issue(user.id)

    def request_password_reset(self, email: str) -> str:
        user = self._by_email(email)
        if not user:
            raise NotFoundError("User not found")
        token = secrets.token_hex(32)
        user.reset_token = token
        user.reset_token_expiry = models.now_local_naive() + dt.timedelta(
            minutes=self.settings.RESET_TOKEN_TTL_MINUTES
        )
        self.db.commit()
        # no mail channel; the token is only visible to operators
        logger.debug("password reset token issued for user %s: %s", user.id, token)
        return token

    def reset_password(self, token: str, new_password: str) -> None:
        user = (
            self.db.query(models.User)
            .filter(
                models.User.reset_token == token,
                models.User.reset_token_expiry > models.now_local_naive(),
            )
            .first()
        )
        if not user:
            raise ValidationError("Invalid or expired reset token")
        user.password_hash = hash_password(new_password, self.settings.BCRYPT_ROUNDS)
        user.reset_token = None
        user.reset_token_expiry = None
        self.db.commit()
        logger.info("password reset for user %s", user.id)

    def get_profile(self, user_id: int) -> models.User:
        user = self.db.get(models.User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def authenticate_token(self, token: str) -> models.User:
        user_id = self.tokens.verify(token)
        user = self.db.get(models.User, user_id)
        if not user:
            raise AuthError("Invalid token.")
        return user

    def update_profile(self, user_id: int, payload: ProfileUpdate) -> models.User:
        user = self.get_profile(user_id)
        if payload.first_name is not None:
            user.first_name = payload.first_name
        if payload.last_name is not None:
            user.last_name = payload.last_name
        self.db.commit()
        self.db.refresh(user)
        return user

from __future__ import annotations

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import Settings
from .errors import AuthError


TOKEN_SALT = "finance-api-access"


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash stored for the user
        return False


class TokenService:
    """Issue and verify signed, timestamped bearer tokens carrying a user id."""

    def __init__(self, settings: Settings) -> None:
        self.max_age = settings.TOKEN_MAX_AGE_SECONDS
        self._serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt=TOKEN_SALT)

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"user_id": user_id})

    def verify(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise AuthError("Token expired.") from exc
        except BadSignature as exc:
            raise AuthError("Invalid token.") from exc
        user_id = payload.get("user_id") if isinstance(payload, dict) else None
        if not isinstance(user_id, int):
            raise AuthError("Invalid token.")
        return user_id

from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from ..common.datetime_utils import Clock, now_local
from ..core.constants import DEFAULT_TOKEN_TTL_HOURS, JWT_ALGORITHM
from ..core.enums import Role
from ..core.exceptions import InvalidCredentialError
from .model import CurrentUser, User


class TokenService:
    """Issue and resolve bearer credentials.

    Tokens are HS256 JWTs carrying ``id, username, email, role`` plus ``iat``/``exp``.
    Expiry is checked against the injected clock rather than the wall clock.
    """

    def __init__(self, secret_key: str, *, ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS, clock: Clock = now_local):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret = secret_key
        self._ttl = timedelta(hours=int(ttl_hours))
        self._clock = clock

    @staticmethod
    def _timestamp(value) -> int:
        return int(value.timestamp())

    def issue(self, user: User) -> str:
        now = self._clock()
        claims = {
            "sub": str(user.user_id),
            "id": user.user_id,
            "username": user.username,
            "email": user.email,
            "role": user.role.value,
            "iat": self._timestamp(now),
            "exp": self._timestamp(now + self._ttl),
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def resolve(self, token: str) -> CurrentUser:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidCredentialError("Invalid token") from e

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or self._timestamp(self._clock()) >= exp:
            raise InvalidCredentialError("Token expired")

        try:
            return CurrentUser(
                user_id=int(claims["id"]),
                username=str(claims["username"]),
                email=str(claims["email"]),
                role=Role(claims["role"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidCredentialError("Invalid token") from e

"""Bearer tokens: issuing them at login, checking them on protected routes,
and reading the caller's id back out of them.

Tokens are HS256 JWTs. Signature, expiry, issuer and audience are checked
once by :class:`BearerScheme` before a handler runs; handlers then use
:class:`TokenVerifier` to read the subject id without re-checking.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .config import JwtSettings
from .exceptions import Unauthenticated
from .models import User

log = logging.getLogger(__name__)

NAME_IDENTIFIER = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier"
DISPLAY_GENDER = "male"

bearer_credentials = HTTPBearer(auto_error=False)


class TokenIssuer:
    def __init__(self, settings: JwtSettings):
        self.settings = settings

    def issue(self, user: User) -> str:
        """Build a signed token for a user whose password was already checked."""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.settings.expire_minutes)
        claims = {
            "name": user.user_name,
            "gender": DISPLAY_GENDER,
            "email": user.email,
            "exp": int(expire.timestamp()),
            "jti": str(uuid.uuid4()),
            NAME_IDENTIFIER: str(user.id),
            "aud": self.settings.audience,
            "iss": self.settings.issuer,
        }
        return jwt.encode(claims, self.settings.secret, algorithm=self.settings.algorithm)


class TokenVerifier:
    """Reads claims from a token that the bearer scheme has already accepted."""

    def get_user_id(self, token: str) -> Optional[str]:
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as ex:
            log.debug("get_user_id(): unreadable token: %s", ex)
            return None
        user_id = claims.get(NAME_IDENTIFIER)
        if user_id is None:
            return None
        return str(user_id)


class BearerScheme:
    def __init__(self, settings: JwtSettings):
        self.settings = settings

    def validate(self, token: str) -> dict:
        return jwt.decode(
            token,
            self.settings.secret,
            algorithms=[self.settings.algorithm],
            audience=self.settings.audience,
            issuer=self.settings.issuer,
            options={
                "leeway": self.settings.leeway_seconds,
                "require_aud": True,
                "require_iss": True,
                "require_exp": True,
            },
        )

    def authenticate(self, credentials: Optional[HTTPAuthorizationCredentials]) -> str:
        """Return the raw token when it is valid, raise :class:`Unauthenticated` otherwise."""
        if credentials is None or not credentials.credentials:
            log.debug("authenticate() failed: no bearer token")
            raise Unauthenticated()
        token = credentials.credentials
        try:
            self.validate(token)
        except ExpiredSignatureError:
            log.debug("authenticate() failed: token expired")
            raise Unauthenticated(expired=True)
        except JWTError as ex:
            log.debug("authenticate() failed: %s", ex)
            raise Unauthenticated() from ex
        return token


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def require_bearer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_credentials),
) -> str:
    """Dependency for protected routes, gives the handler the validated raw token."""
    return request.app.state.bearer_scheme.authenticate(credentials)

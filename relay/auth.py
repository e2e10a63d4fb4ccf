"""Authentication and session cookie utilities."""

import base64
import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Request

from common.constants import AUTH_COOKIE_NAME
from common.logging_config import get_logger
from relay import config
from relay.config import RelayConfig, build_request_config
from relay.exceptions import AuthRequired

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(secret.encode('utf-8'), payload.encode('utf-8'), hashlib.sha256).hexdigest()


class AuthGate:
    """
    Capability check for admin routes backed by a signed session cookie.

    The configured password is hashed once; login attempts are verified
    against that hash.
    """

    def __init__(self, username: str, password: str, secret: str, cookie_days: int = 7):
        self.username = username
        self.secret = secret or password
        self.cookie_days = cookie_days
        self._password_hash = hash_password(password) if password else None

    def check_credentials(self, username: str, password: str) -> bool:
        if self._password_hash is None or username != self.username:
            return False
        return verify_password(password, self._password_hash)

    def issue_token(self, now: Optional[datetime] = None) -> tuple[str, datetime]:
        """
        Create a session token for the configured user.

        Returns:
            Tuple of (token, expiration datetime)
        """
        now = now or datetime.now(timezone.utc)
        expiration = now + timedelta(days=self.cookie_days)
        payload = json.dumps({
            "username": self.username,
            "expiration": int(expiration.timestamp() * 1000),
        })
        encoded = base64.urlsafe_b64encode(payload.encode('utf-8')).decode('ascii')
        return f"{encoded}.{_sign(encoded, self.secret)}", expiration

    def verify_token(self, token: str) -> bool:
        # no signing key configured, no session is valid
        if not self.secret:
            return False
        encoded, _, signature = token.partition(".")
        if not signature or not hmac.compare_digest(signature, _sign(encoded, self.secret)):
            return False
        try:
            data = json.loads(base64.urlsafe_b64decode(encoded.encode('ascii')))
        except (ValueError, UnicodeDecodeError):
            return False
        if not isinstance(data, dict):
            return False
        if time.time() * 1000 > data.get("expiration", 0):
            return False
        return data.get("username") == self.username

    def is_authorized(self, request: Request, enabled: bool) -> bool:
        if not enabled:
            return True
        token = request.cookies.get(AUTH_COOKIE_NAME)
        return bool(token) and self.verify_token(token)

    def session_cookie(self, token: str, expiration: datetime) -> str:
        max_age = self.cookie_days * 24 * 3600
        expires = expiration.strftime("%a, %d %b %Y %H:%M:%S GMT")
        return f"{AUTH_COOKIE_NAME}={token}; Path=/; HttpOnly; Secure; Max-Age={max_age}; Expires={expires}"


_gate: Optional[AuthGate] = None


def get_auth_gate() -> AuthGate:
    """
    FastAPI dependency returning the process auth gate.
    """
    global _gate
    if _gate is None:
        _gate = AuthGate(
            username=config.RELAY_USERNAME,
            password=config.RELAY_PASSWORD,
            secret=config.RELAY_SECRET,
            cookie_days=config.COOKIE_DAYS,
        )
    return _gate


async def require_auth(
    request: Request,
    relay_config: RelayConfig = Depends(build_request_config),
    gate: AuthGate = Depends(get_auth_gate),
) -> None:
    """
    FastAPI dependency enforcing the auth gate.

    Raises:
        AuthRequired: Turned into a redirect to the login page by the app
    """
    if not gate.is_authorized(request, relay_config.enable_auth):
        logger.warning(f"Unauthorized request redirected to login path={request.url.path}")
        raise AuthRequired("Login required")

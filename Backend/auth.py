"""
Session tokens, password hashing and the FastAPI auth dependencies.

Session tokens are stateless: a signed ``{"sub": player_id, "exp": unix_ts}``
payload. Nothing is stored server-side, so a token stays valid until it
expires and there is no revocation.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadData, URLSafeSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from config import settings
from errors import Unauthenticated

logger = logging.getLogger(__name__)

TOKEN_SALT = "player-session"
PASSWORD_METHOD = "scrypt"


class SessionAuthority:
    """Issues and verifies signed session tokens bound to a player id."""

    def __init__(self, secret: str, lifetime: timedelta = timedelta(days=365)):
        self.lifetime = lifetime
        self._serializer = URLSafeSerializer(secret, salt=TOKEN_SALT)

    def issue(self, player_id: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        expiry = int((now + self.lifetime).timestamp())
        return self._serializer.dumps({"sub": player_id, "exp": expiry})

    def verify(self, token: str, now: Optional[datetime] = None) -> str:
        """Return the player id asserted by ``token``.

        Raises Unauthenticated when the token is malformed, its signature does
        not match, or its expiry has passed.
        """
        try:
            claims = self._serializer.loads(token)
        except BadData:
            raise Unauthenticated("Invalid session token")

        if not isinstance(claims, dict):
            raise Unauthenticated("Invalid session token")
        player_id = claims.get("sub")
        expiry = claims.get("exp")
        if not isinstance(player_id, str) or not isinstance(expiry, int):
            raise Unauthenticated("Invalid session token")

        now = now or datetime.now(timezone.utc)
        if now.timestamp() >= expiry:
            raise Unauthenticated("Session token expired")
        return player_id

    def verify_optional(self, token: Optional[str]) -> Optional[str]:
        """Like verify, but every failure collapses to ``None``."""
        if not token:
            return None
        try:
            return self.verify(token)
        except Unauthenticated:
            return None


@lru_cache(maxsize=1)
def get_authority() -> SessionAuthority:
    return SessionAuthority(
        settings.SESSION_SECRET,
        lifetime=timedelta(days=settings.SESSION_LIFETIME_DAYS),
    )


# ── Passwords ────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return generate_password_hash(password, method=PASSWORD_METHOD)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


# ── Dependencies ─────────────────────────────────────────────────

bearer_scheme = HTTPBearer(auto_error=False)


def require_player(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authority: SessionAuthority = Depends(get_authority),
) -> str:
    """Resolve the authenticated player id or reject the request."""
    if credentials is None:
        raise Unauthenticated()
    try:
        return authority.verify(credentials.credentials)
    except Unauthenticated:
        logger.warning("Rejected session token")
        # Same answer for every failure mode
        raise Unauthenticated()


def optional_player(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authority: SessionAuthority = Depends(get_authority),
) -> Optional[str]:
    """Resolve the player id when a valid token is present, else ``None``."""
    if credentials is None:
        return None
    return authority.verify_optional(credentials.credentials)

from __future__ import annotations

import hashlib
import time

from fastapi import HTTPException, status
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

FORBIDDEN_PASSWORDS = frozenset({"password"})


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    # OIDC-only accounts carry an empty hash
    if not password_hash or not plain_password:
        return False
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        return False


def session_auth_hash(password_hash: str) -> str:
    """Fingerprint of the stored hash; sessions die when the password changes."""
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()


class RateLimiter:
    def __init__(self, max_attempts: int = 5, window_seconds: int = 60):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._attempts: dict[str, list[float]] = {}

    def is_allowed(self, key: str) -> bool:
        now = time.time()
        attempts = [ts for ts in self._attempts.get(key, []) if now - ts <= self.window_seconds]
        attempts.append(now)
        self._attempts[key] = attempts
        return len(attempts) <= self.max_attempts

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._attempts.clear()
        else:
            self._attempts.pop(key, None)

    def guard(self, key: str):
        if not self.is_allowed(key):
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many attempts, try later")


rate_limiter = RateLimiter()

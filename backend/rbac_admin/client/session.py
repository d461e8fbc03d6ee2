"""Explicit console session: bearer token plus the user cached at sign-in.

The session is passed to the API client and the capability resolver instead
of being read from global storage. ``invalidate()`` is the single place that
clears it (called on every 401).
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Callable, Dict, List, Optional

import jwt

logger = logging.getLogger(__name__)


class SessionContext:

    def __init__(self, token: Optional[str] = None, user: Optional[Dict[str, Any]] = None, path: Optional[str] = None):
        self.token = token
        self.user = user
        self.path = path
        self._listeners: List[Callable[['SessionContext'], None]] = []

    # --- state ---
    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get('id') if self.user else None

    @property
    def cached_role(self) -> Optional[Dict[str, Any]]:
        return self.user.get('role') if self.user else None

    def token_expired(self, now: Optional[float] = None) -> bool:
        """True when there is no token, it cannot be decoded, or its ``exp`` is in the past.

        Only the expiry is read; the signature is the server's business.
        """
        if not self.token:
            return True
        try:
            claims = jwt.decode(self.token, options={'verify_signature': False})
        except jwt.PyJWTError:
            return True
        exp = claims.get('exp')
        if exp is None:
            return False
        return exp <= (now if now is not None else time.time())

    def establish(self, token: str, user: Dict[str, Any]) -> None:
        # Never keep anything password-like in the cache
        cached = {k: v for k, v in user.items() if k not in ('password', 'password_hash')}
        self.token = token
        self.user = cached
        self.save()

    def update_user(self, user: Dict[str, Any]) -> None:
        if self.user is None:
            return
        self.user = {**self.user, **{k: v for k, v in user.items() if k not in ('password', 'password_hash')}}
        self.save()

    def on_invalidate(self, callback: Callable[['SessionContext'], None]) -> None:
        self._listeners.append(callback)

    def invalidate(self) -> None:
        logger.info('Session invalidated')
        self.token = None
        self.user = None
        if self.path and os.path.exists(self.path):
            os.remove(self.path)
        for callback in list(self._listeners):
            callback(self)

    # --- persistence ---
    def save(self) -> None:
        if not self.path:
            return
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump({'token': self.token, 'user': self.user}, fh)

    @classmethod
    def load(cls, path: str) -> 'SessionContext':
        if not os.path.exists(path):
            return cls(path=path)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning('Ignoring unreadable session file %s: %s', path, e)
            return cls(path=path)
        return cls(token=data.get('token'), user=data.get('user'), path=path)

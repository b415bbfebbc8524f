"""Request-forgery tokens bound to an action and a user.

Tokens are HMAC-SHA256 digests over ``action|user|tick`` where the tick
advances every half lifetime; a token stays valid for the tick it was
issued in and the one after, so its real lifetime is between half and
one full ``lifetime_secs``.
"""

from __future__ import annotations

import hashlib
import hmac
import math
import secrets
import time
from collections.abc import Callable

_TOKEN_LENGTH = 20


class NonceManager:
    def __init__(
        self,
        secret: str = "",
        lifetime_secs: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        # An ephemeral secret invalidates all tokens on restart
        self._secret = (secret or secrets.token_hex(32)).encode("utf-8")
        self._half_life = max(1.0, lifetime_secs / 2)
        self._clock = clock

    def _tick(self) -> int:
        return math.ceil(self._clock() / self._half_life)

    def _digest(self, action: str, user: str, tick: int) -> str:
        msg = f"{action}|{user}|{tick}".encode("utf-8")
        return hmac.new(self._secret, msg, hashlib.sha256).hexdigest()[:_TOKEN_LENGTH]

    def create(self, action: str, user: str) -> str:
        return self._digest(action, user, self._tick())

    def verify(self, nonce: str, action: str, user: str) -> bool:
        if not nonce:
            return False
        tick = self._tick()
        return any(
            hmac.compare_digest(nonce, self._digest(action, user, t))
            for t in (tick, tick - 1)
        )

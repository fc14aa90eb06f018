"""User-Agent pool abstraction."""

from __future__ import annotations

import random
from threading import Lock
from typing import Iterable, List, Optional


class UserAgentPool:
    """Return random user agents from configured pool."""

    def __init__(self, user_agents: Iterable[str] | None = None) -> None:
        self._lock = Lock()
        self._uas: List[str] = []
        if user_agents:
            self._uas.extend(ua.strip() for ua in user_agents if ua.strip())

    def get(self) -> Optional[str]:
        with self._lock:
            if not self._uas:
                return None
            return random.choice(self._uas)

    def __len__(self) -> int:
        return len(self._uas)


__all__ = ["UserAgentPool"]

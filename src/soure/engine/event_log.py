from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict, List

EVENT_LOG_CAPACITY = 50


class EventLog:
    """Bounded human-readable trace; the oldest entries fall off the front."""

    def __init__(
        self,
        capacity: int = EVENT_LOG_CAPACITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: Deque[Dict[str, object]] = deque(maxlen=capacity)
        self._clock = clock

    def add(self, msg: str) -> None:
        self._entries.append({"t": int(self._clock() * 1000), "msg": msg})

    def messages(self) -> List[str]:
        return [str(entry["msg"]) for entry in self._entries]

    def to_list(self) -> List[Dict[str, object]]:
        return [dict(entry) for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

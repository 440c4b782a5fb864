import threading
import time
from typing import Callable, Dict, List


class SubmissionRateGovernor:
    """Sliding-window admission control for scored submissions, per session.

    Only accepted submissions are recorded, so a rejected call never
    extends the window.
    """

    def __init__(self, limit: int = 5, window_sec: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_sec = window_sec
        self.clock = clock
        self._lock = threading.Lock()
        self._accepted: Dict[str, List[float]] = {}

    def _recent(self, sid: str, now: float) -> List[float]:
        recent = [t for t in self._accepted.get(sid, []) if now - t < self.window_sec]
        if recent:
            self._accepted[sid] = recent
        else:
            self._accepted.pop(sid, None)
        return recent

    def check(self, sid: str) -> bool:
        with self._lock:
            now = self.clock()
            recent = self._recent(sid, now)
            if len(recent) >= self.limit:
                return False
            recent.append(now)
            self._accepted[sid] = recent
            return True

    def remaining(self, sid: str) -> int:
        with self._lock:
            return max(0, self.limit - len(self._recent(sid, self.clock())))

    def forget(self, sid: str) -> None:
        with self._lock:
            self._accepted.pop(sid, None)

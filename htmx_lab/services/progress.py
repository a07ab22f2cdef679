from __future__ import annotations
import threading

# Fixed steps the progress-bar demo walks through; anything else restarts at 0.
SEQUENCE = {0: 2, 2: 18, 18: 22, 22: 52, 52: 67, 67: 98, 98: 100}


class ProgressBar:
    def __init__(self):
        self.percent = 0
        self._lock = threading.Lock()

    def start(self) -> int:
        with self._lock:
            if self.percent == 0:
                self.percent = 2
            return self.percent

    def advance(self) -> int:
        with self._lock:
            self.percent = SEQUENCE.get(self.percent, 0)
            return self.percent

    def finalize(self) -> int:
        with self._lock:
            self.percent = 0
            return 100

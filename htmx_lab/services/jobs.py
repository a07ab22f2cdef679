from __future__ import annotations
import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set, Union

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = (JobState.COMPLETED, JobState.FAILED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class JobStatus:
    """Point-in-time snapshot of one simulated job."""
    id: str
    state: JobState = JobState.PENDING
    progress: int = 0
    result: Optional[str] = None
    error: Optional[str] = None
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "state": self.state.value,
            "progress": self.progress,
            "result": self.result,
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class JobLimitReached(RuntimeError):
    pass


class JobTracker:
    """Runs simulated report jobs and answers status queries by id.

    Every stored value is a frozen ``JobStatus``; writers swap in a new
    snapshot under ``_lock`` so readers never see a half-updated record.
    ``status`` and ``cleanup`` never await.
    """

    def __init__(
        self,
        steps: int = 10,
        interval: float = 0.5,
        increment: int = 10,
        max_running: Optional[int] = None,
        work: Optional[Callable[[int], Awaitable[None]]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if steps < 1:
            raise ValueError("steps must be >= 1")
        self.steps = steps
        self.interval = interval
        self.increment = increment
        self.max_running = max_running or None
        self._work = work
        self._clock = clock
        self._jobs: Dict[str, JobStatus] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._lock = threading.Lock()

    def start(self) -> JobStatus:
        loop = asyncio.get_running_loop()
        job_id = uuid.uuid4().hex
        status = JobStatus(id=job_id, state=JobState.RUNNING, progress=0, started_at=self._clock())
        with self._lock:
            if self.max_running is not None and self._running_count() >= self.max_running:
                raise JobLimitReached(f"{self.max_running} jobs already running")
            self._jobs[job_id] = status

        task = loop.create_task(self._run(job_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: self._on_done(job_id, t))
        logger.info("job %s started", job_id)
        return status

    def status(self, job_id: str) -> Optional[JobStatus]:
        with self._lock:
            return self._jobs.get(job_id)

    def cleanup(self, max_age: Union[timedelta, float, int]) -> int:
        if not isinstance(max_age, timedelta):
            max_age = timedelta(seconds=max_age)
        cutoff = self._clock() - max_age
        with self._lock:
            old = [job_id for job_id, s in self._jobs.items() if s.started_at <= cutoff]
            for job_id in old:
                del self._jobs[job_id]
        if old:
            logger.info("cleanup removed %d job(s)", len(old))
        return len(old)

    def running(self) -> int:
        with self._lock:
            return self._running_count()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    async def aclose(self) -> None:
        """Cancel routines still in flight (application shutdown)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _on_done(self, job_id: str, task: asyncio.Task) -> None:
        # a task cancelled before its first step never enters _run's handler
        if task.cancelled():
            self._update(job_id, state=JobState.FAILED, error="cancelled", completed_at=self._clock())

    def _running_count(self) -> int:
        return sum(1 for s in self._jobs.values() if s.state == JobState.RUNNING)

    def _update(self, job_id: str, **changes) -> None:
        with self._lock:
            current = self._jobs.get(job_id)
            # evicted, or already terminal
            if current is None or current.is_terminal:
                return
            if "progress" in changes:
                changes["progress"] = max(current.progress, changes["progress"])
            self._jobs[job_id] = replace(current, **changes)

    async def _step(self, i: int) -> None:
        if self._work is not None:
            await self._work(i)
        else:
            await asyncio.sleep(self.interval)

    async def _run(self, job_id: str) -> None:
        try:
            for i in range(1, self.steps + 1):
                await self._step(i)
                if i < self.steps:
                    # 100 is reserved for the completed state
                    self._update(job_id, progress=min(i * self.increment, 99))
            self._update(
                job_id,
                state=JobState.COMPLETED,
                progress=100,
                result=f"Report generated successfully at {datetime.now():%H:%M:%S}",
                completed_at=self._clock(),
            )
            logger.info("job %s completed", job_id)
        except asyncio.CancelledError:
            self._update(job_id, state=JobState.FAILED, error="cancelled", completed_at=self._clock())
            raise
        except Exception as e:
            logger.exception("job %s failed", job_id)
            self._update(job_id, state=JobState.FAILED, error=str(e) or type(e).__name__, completed_at=self._clock())

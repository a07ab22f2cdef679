# tests/test_jobs.py
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from htmx_lab.services.jobs import JobLimitReached, JobState, JobStatus, JobTracker


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


async def _wait_terminal(tracker, job_id, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        s = tracker.status(job_id)
        if s is not None and s.is_terminal:
            return s
        await asyncio.sleep(0.005)
    raise AssertionError(f"job {job_id} did not finish")


def _consistent(s):
    if s.state == JobState.COMPLETED:
        return s.progress == 100 and bool(s.result) and s.error is None and s.completed_at is not None
    if s.state == JobState.FAILED:
        return s.progress < 100 and s.result is None and bool(s.error) and s.completed_at is not None
    return s.progress < 100 and s.result is None and s.error is None and s.completed_at is None


def test_start_returns_running_snapshot():
    async def main():
        tracker = JobTracker(interval=0.01)
        s = tracker.start()
        assert s.state == JobState.RUNNING
        assert s.progress == 0
        assert s.id
        assert s.completed_at is None
        assert tracker.status(s.id) == s
        await tracker.aclose()
    asyncio.run(main())


def test_job_runs_to_completion():
    async def main():
        tracker = JobTracker(interval=0.001)
        s = tracker.start()
        final = await _wait_terminal(tracker, s.id)
        assert final.state == JobState.COMPLETED
        assert final.progress == 100
        assert final.result.startswith("Report generated successfully at ")
        assert final.error is None
        assert final.completed_at >= final.started_at
        # terminal snapshot no longer changes
        await asyncio.sleep(0.01)
        assert tracker.status(s.id) == final
    asyncio.run(main())


def test_progress_is_monotonic_while_polling():
    async def main():
        tracker = JobTracker(interval=0.002)
        s = tracker.start()
        seen = []
        while True:
            cur = tracker.status(s.id)
            seen.append(cur.progress)
            assert _consistent(cur)
            if cur.is_terminal:
                break
            await asyncio.sleep(0.001)
        assert seen == sorted(seen)
        assert seen[0] == 0 and seen[-1] == 100
    asyncio.run(main())


def test_unknown_id_is_not_found():
    tracker = JobTracker()
    assert tracker.status("never-issued") is None


def test_start_requires_running_loop():
    with pytest.raises(RuntimeError):
        JobTracker().start()


def test_failure_is_recorded_not_raised():
    async def work(step):
        if step == 3:
            raise RuntimeError("disk full")
        await asyncio.sleep(0)

    async def main():
        tracker = JobTracker(work=work)
        s = tracker.start()
        final = await _wait_terminal(tracker, s.id)
        assert final.state == JobState.FAILED
        assert final.error == "disk full"
        assert final.result is None
        assert final.progress == 20
        assert final.completed_at is not None
    asyncio.run(main())


def test_cleanup_zero_removes_everything():
    async def main():
        tracker = JobTracker(interval=0.001)
        ids = [tracker.start().id for _ in range(5)]
        await _wait_terminal(tracker, ids[0])
        assert tracker.cleanup(0) == 5
        assert all(tracker.status(i) is None for i in ids)
        await tracker.aclose()
    asyncio.run(main())


def test_cleanup_only_removes_old_jobs():
    clock = FakeClock()

    async def main():
        tracker = JobTracker(interval=10, clock=clock)
        old = tracker.start()
        clock.now += timedelta(minutes=10)
        fresh = tracker.start()
        assert tracker.cleanup(timedelta(minutes=5)) == 1
        assert tracker.status(old.id) is None
        assert tracker.status(fresh.id) is not None
        assert tracker.cleanup(600) == 0
        await tracker.aclose()
    asyncio.run(main())


def test_evicted_running_job_stays_gone():
    async def main():
        tracker = JobTracker(interval=0.001)
        s = tracker.start()
        tracker.cleanup(0)
        await asyncio.sleep(0.05)
        assert tracker.status(s.id) is None
    asyncio.run(main())


def test_running_cap_and_shutdown_cancel():
    async def main():
        tracker = JobTracker(interval=10, max_running=2)
        a = tracker.start()
        b = tracker.start()
        with pytest.raises(JobLimitReached):
            tracker.start()
        assert tracker.running() == 2
        await tracker.aclose()
        for s in (a, b):
            final = tracker.status(s.id)
            assert final.state == JobState.FAILED
            assert final.error == "cancelled"
        assert tracker.running() == 0
    asyncio.run(main())


def test_shutdown_before_first_step_records_cancelled():
    async def main():
        calls = []

        async def work(i):
            calls.append(i)

        tracker = JobTracker(work=work)
        s = tracker.start()
        # the task has not been scheduled yet
        await tracker.aclose()
        final = tracker.status(s.id)
        assert calls == []
        assert final.state == JobState.FAILED
        assert final.error == "cancelled"
        assert final.completed_at is not None
        assert tracker.running() == 0
    asyncio.run(main())


def test_snapshot_defaults_started_at():
    s = JobStatus(id="x")
    assert s.started_at.tzinfo is not None
    assert s.to_dict()["started_at"] == s.started_at.isoformat()


def test_hundred_concurrent_jobs_with_concurrent_polling():
    async def main():
        tracker = JobTracker(interval=0.002)
        ids = [tracker.start().id for _ in range(100)]
        assert len(set(ids)) == 100

        async def poll(job_id):
            last = 0
            while True:
                s = tracker.status(job_id)
                assert _consistent(s)
                assert s.progress >= last
                last = s.progress
                if s.is_terminal:
                    return s
                await asyncio.sleep(0.001)

        def poll_from_thread():
            for _ in range(200):
                for job_id in ids:
                    assert _consistent(tracker.status(job_id))

        loop = asyncio.get_running_loop()
        results = await asyncio.gather(
            loop.run_in_executor(None, poll_from_thread),
            *(poll(i) for i in ids),
        )
        finals = results[1:]
        assert all(s.state == JobState.COMPLETED for s in finals)
        assert len(tracker) == 100
    asyncio.run(main())

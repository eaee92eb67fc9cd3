"""Unit tests for the Job tracker.

WHY: wait() is the main entry point for every asynchronous Sidearm call.
An off-by-one in the poll loop means either hammering the API or timing
out a job that was about to finish, so the loop's timing contract is
tested against a virtual clock.

HOW: Tests are organized by concern:
  - TestJobConstruction: initial state from creation responses and bare ids
  - TestPoll: single fetch, last-write-wins, error propagation
  - TestWait: sleep-before-poll, poll counts, deadline and failed jobs
  - TestCancellation: cancel_event and task cancellation
  - TestConcurrency: poll() and wait() racing on one Job

RULES:
- time.monotonic and the sleep helper in sidearm.api.job are patched with
  a FakeClock, so no test sleeps for real (except the short cancellation tests)
- Job status responses use the {"data": {...}} envelope
"""

from __future__ import annotations

import asyncio
import typing
from unittest.mock import MagicMock, patch

import httpx
import pytest

from _helpers import API_KEY, BASE_URL, FakeClock, FakeService, envelope, make_http
from sidearm.api.client import HttpClient
from sidearm.api.errors import (
    JobCancelledError,
    JobTimeoutError,
    SidearmAPIError,
    UnknownJobStatusError,
)
from sidearm.api.job import Job
from sidearm.api.models import JobCreated, JobData, JobProgress, JobStatus


def _status(status: str, **fields) -> httpx.Response:
    return envelope({"id": "j1", "status": status, **fields})


def _with_job(service: FakeService, coro_fn, source="j1"):
    """Open a client, build a Job, run coro_fn(job), return (job, result)."""

    async def _run():
        async with make_http(service) as http:
            job = Job(http, source)
            return job, await coro_fn(job)

    return asyncio.run(_run())


def _wait_with_clock(service: FakeService, clock: FakeClock, **wait_kwargs):
    with patch("sidearm.api.job.time") as mock_time, \
         patch("sidearm.api.job._sleep", new=clock.sleep):
        mock_time.monotonic.side_effect = clock.monotonic
        return _with_job(service, lambda job: job.wait(**wait_kwargs))


# ---------------------------------------------------------------------------
# TestJobConstruction
# ---------------------------------------------------------------------------


class TestJobConstruction:
    """A fresh Job is always queued and not done."""

    def test_from_creation_response(self):
        job = Job(MagicMock(), {"job_id": "j1", "status_url": "/api/v1/jobs/j1"})
        assert job.id == "j1"
        assert job.status_url == "/api/v1/jobs/j1"
        assert job.latest == JobData(id="j1", status=JobStatus.QUEUED)
        assert job.done is False

    def test_creation_status_is_not_inspected(self):
        job = Job(MagicMock(), {"job_id": "j1", "status": "completed"})
        assert job.latest.status is JobStatus.QUEUED
        assert job.done is False

    def test_from_bare_id(self):
        job = Job(MagicMock(), "j-resume")
        assert job.id == "j-resume"
        assert job.status_url is None
        assert job.latest.status is JobStatus.QUEUED

    def test_from_job_created(self):
        job = Job(MagicMock(), JobCreated(job_id="j2", status_url="u"))
        assert (job.id, job.status_url) == ("j2", "u")

    def test_missing_job_id_raises(self):
        with pytest.raises(KeyError):
            Job(MagicMock(), {"status_url": "/x"})

    def test_path_quotes_id(self):
        assert Job(MagicMock(), "a/b c").path == "/api/v1/jobs/a%2Fb%20c"

    def test_job_data_annotations_resolve(self):
        hints = typing.get_type_hints(JobData)
        assert hints["status"] is JobStatus
        assert hints["progress"] == (JobProgress | None)
        assert hints["result"] == (dict[str, typing.Any] | None)


# ---------------------------------------------------------------------------
# TestPoll
# ---------------------------------------------------------------------------


class TestPoll:
    """poll() performs one GET and replaces the latest state."""

    def test_running_then_completed(self):
        service = FakeService(
            envelope({"status": "running", "progress": {"completed": 1, "total": 4}}),
            envelope({"status": "completed", "result": {"ok": True}}),
        )

        async def _two_polls(job: Job):
            first = await job.poll()
            assert first.status is JobStatus.RUNNING
            assert first.progress.completed == 1
            assert job.done is False
            return await job.poll()

        job, second = _with_job(service, _two_polls)
        assert second.status is JobStatus.COMPLETED
        assert second.result == {"ok": True}
        assert second.id == "j1"
        assert job.done is True
        assert job.latest is second
        assert len(service.requests) == 2
        assert service.last.method == "GET"
        assert service.last.url.path == "/api/v1/jobs/j1"

    def test_last_write_wins_without_merge(self):
        service = FakeService(
            _status("running", result={"partial": 1}),
            _status("running"),
        )

        async def _two_polls(job: Job):
            await job.poll()
            return await job.poll()

        job, latest = _with_job(service, _two_polls)
        assert latest.result is None

    def test_poll_on_terminal_job_refetches(self):
        service = FakeService(_status("completed", result={"ok": True}), repeat_last=True)

        async def _three_polls(job: Job):
            results = [await job.poll() for _ in range(3)]
            return results

        job, results = _with_job(service, _three_polls)
        assert len(service.requests) == 3
        assert all(r == results[0] for r in results)
        assert job.done is True

    def test_api_error_propagates_and_keeps_state(self):
        service = FakeService(httpx.Response(404, json={"message": "Job not found"}))

        async def _poll(job: Job):
            with pytest.raises(SidearmAPIError) as exc_info:
                await job.poll()
            return exc_info.value

        job, err = _with_job(service, _poll)
        assert err.status_code == 404
        assert job.latest.status is JobStatus.QUEUED

    def test_unknown_status_raises_typed_error(self):
        service = FakeService(envelope({"status": "cancelled"}))

        async def _poll(job: Job):
            with pytest.raises(UnknownJobStatusError) as exc_info:
                await job.poll()
            return exc_info.value

        job, err = _with_job(service, _poll)
        assert isinstance(err, ValueError)
        assert err.job_id == "j1"
        assert err.status == "cancelled"
        assert "cancelled" in str(err)
        assert job.latest.status is JobStatus.QUEUED

    def test_unknown_status_ends_wait(self):
        service = FakeService(_status("running"), _status("archived"))
        clock = FakeClock()
        with pytest.raises(UnknownJobStatusError):
            _wait_with_clock(service, clock, timeout_s=30.0, interval_s=1.0)
        assert len(service.requests) == 2


# ---------------------------------------------------------------------------
# TestWait
# ---------------------------------------------------------------------------


class TestWait:
    """wait() sleeps, polls, and stops at a terminal state or the deadline."""

    def test_resolves_after_three_polls(self):
        service = FakeService(
            _status("queued"),
            _status("queued"),
            _status("completed", result={"ok": True}),
        )
        clock = FakeClock()
        job, result = _wait_with_clock(service, clock, timeout_s=5.0, interval_s=1.0)

        assert result.status is JobStatus.COMPLETED
        assert result.result == {"ok": True}
        assert len(service.requests) == 3
        assert clock.sleeps == [1.0, 1.0, 1.0]
        assert clock.elapsed >= 3.0

    def test_times_out_after_one_poll(self):
        service = FakeService(_status("running"), repeat_last=True)
        clock = FakeClock()

        with pytest.raises(JobTimeoutError) as exc_info:
            _wait_with_clock(service, clock, timeout_s=1.5, interval_s=1.0)

        err = exc_info.value
        assert len(service.requests) == 1
        assert clock.elapsed >= 1.5
        assert err.job_id == "j1"
        assert err.timeout_s == 1.5
        assert err.last_status == "running"
        assert "j1" in str(err) and "running" in str(err)

    def test_timeout_error_is_timeout_error(self):
        assert isinstance(JobTimeoutError("j", 1.0, "queued"), TimeoutError)

    def test_always_sleeps_before_first_poll(self):
        events = []
        clock = FakeClock()

        def _reply(request):
            events.append(("poll", clock.now))
            return _status("completed")

        async def _sleep(seconds, cancel_event=None):
            events.append(("sleep", clock.now))
            return await clock.sleep(seconds, cancel_event)

        service = FakeService(_reply)
        with patch("sidearm.api.job.time") as mock_time, \
             patch("sidearm.api.job._sleep", new=_sleep):
            mock_time.monotonic.side_effect = clock.monotonic
            _with_job(service, lambda job: job.wait(interval_s=2.0))

        assert events == [("sleep", 1000.0), ("poll", 1002.0)]

    def test_already_done_returns_without_network(self):
        service = FakeService(_status("completed", result={"n": 1}))
        clock = FakeClock()

        async def _poll_then_wait(job: Job):
            await job.poll()
            return await job.wait(timeout_s=0.0)

        with patch("sidearm.api.job.time") as mock_time, \
             patch("sidearm.api.job._sleep", new=clock.sleep):
            mock_time.monotonic.side_effect = clock.monotonic
            job, result = _with_job(service, _poll_then_wait)

        assert result.result == {"n": 1}
        assert len(service.requests) == 1
        assert clock.sleeps == []

    def test_failed_job_is_returned_not_raised(self):
        service = FakeService(_status("running"), _status("failed", error="Unsupported codec"))
        clock = FakeClock()
        job, result = _wait_with_clock(service, clock, timeout_s=10.0, interval_s=2.0)

        assert result.status is JobStatus.FAILED
        assert result.error == "Unsupported codec"
        assert job.done is True
        assert clock.elapsed == 4.0

    def test_zero_timeout_raises_without_polling(self):
        service = FakeService()
        clock = FakeClock()
        with pytest.raises(JobTimeoutError) as exc_info:
            _wait_with_clock(service, clock, timeout_s=0.0, interval_s=1.0)
        assert service.requests == []
        assert exc_info.value.last_status == "queued"

    def test_default_timeout_and_interval(self):
        service = FakeService(_status("queued"), repeat_last=True)
        clock = FakeClock()
        with pytest.raises(JobTimeoutError) as exc_info:
            _wait_with_clock(service, clock)
        assert exc_info.value.timeout_s == 120.0
        assert set(clock.sleeps) == {2.0}
        # 2s interval inside a 120s budget: the 60th sleep lands on the deadline.
        assert len(service.requests) == 59

    def test_poll_errors_abort_wait(self):
        service = FakeService(_status("running"), httpx.Response(500, text="boom"))
        clock = FakeClock()
        with pytest.raises(SidearmAPIError) as exc_info:
            _wait_with_clock(service, clock, timeout_s=30.0, interval_s=1.0)
        assert exc_info.value.message == "boom"


# ---------------------------------------------------------------------------
# TestCancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    """cancel_event and task cancellation stop the poll loop."""

    def test_preset_cancel_event_stops_before_polling(self):
        service = FakeService()

        async def _wait(job: Job):
            event = asyncio.Event()
            event.set()
            with pytest.raises(JobCancelledError) as exc_info:
                await job.wait(timeout_s=10.0, interval_s=5.0, cancel_event=event)
            return exc_info.value

        job, err = _with_job(service, _wait)
        assert service.requests == []
        assert err.job_id == "j1"
        assert err.last_status == "queued"

    def test_cancel_event_interrupts_sleep(self):
        service = FakeService()

        async def _wait(job: Job):
            event = asyncio.Event()
            asyncio.get_running_loop().call_later(0.01, event.set)
            with pytest.raises(JobCancelledError):
                await asyncio.wait_for(
                    job.wait(timeout_s=60.0, interval_s=30.0, cancel_event=event),
                    timeout=5.0,
                )

        _with_job(service, _wait)
        assert service.requests == []

    def test_cancelling_task_stops_loop(self):
        service = FakeService(_status("queued"), repeat_last=True)

        async def _wait(job: Job):
            task = asyncio.create_task(job.wait(timeout_s=60.0, interval_s=30.0))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        _with_job(service, _wait)
        assert service.requests == []


# ---------------------------------------------------------------------------
# TestConcurrency
# ---------------------------------------------------------------------------


class TestConcurrency:
    """Concurrent poll() and wait() on one Job never overlap their requests."""

    def test_poll_and_wait_are_serialized(self):
        events = []
        replies = [_status("running"), _status("completed", result={"ok": True})]
        release = asyncio.Event()

        async def _handler(request: httpx.Request) -> httpx.Response:
            n = sum(1 for kind, _ in events if kind == "start")
            events.append(("start", n))
            if n == 0:
                await release.wait()
            events.append(("end", n))
            return replies[n]

        async def _release_first():
            await asyncio.sleep(0.01)
            seen = list(events)
            release.set()
            return seen

        async def _run():
            transport = httpx.MockTransport(_handler)
            async with HttpClient(api_key=API_KEY, base_url=BASE_URL, transport=transport) as http:
                job = Job(http, "j1")
                polled, waited, seen = await asyncio.gather(
                    job.poll(),
                    job.wait(timeout_s=5.0, interval_s=0.0),
                    _release_first(),
                )
                return job, polled, waited, seen

        job, polled, waited, seen = asyncio.run(_run())

        # The wait loop's request stays blocked while the first poll is in flight.
        assert seen == [("start", 0)]
        assert events == [("start", 0), ("end", 0), ("start", 1), ("end", 1)]
        assert polled.status is JobStatus.RUNNING
        assert waited.status is JobStatus.COMPLETED
        assert job.latest is waited
        assert job.latest.result == {"ok": True}

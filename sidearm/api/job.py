"""Handle for tracking an asynchronous Sidearm job to completion.

WHY: Protection, detection and algorithm runs are not instant. The API
answers with a job id, and the caller must poll GET /api/v1/jobs/{id}
until the job is completed or failed. Job hides that loop behind
poll() and wait().

HOW: A Job owns one mutable `latest` JobData and a reference to the shared
HttpClient. poll() replaces `latest` with a fresh single-resource GET.
wait() sleeps, polls, and re-checks until a terminal state or its
deadline.

RULES:
- Initial state is always "queued"; the creation response is not inspected
- poll() is last-write-wins, no merging
- wait() always sleeps before its first poll
- No poll is started once the deadline has passed
- A job that reaches "failed" is returned, not raised
- Timeouts raise JobTimeoutError; cancel_event raises JobCancelledError
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping, Union
from urllib.parse import quote

from sidearm.api.client import HttpClient
from sidearm.api.errors import JobCancelledError, JobTimeoutError
from sidearm.api.models import JobCreated, JobData, JobStatus

logger = logging.getLogger(__name__)

JobSource = Union[JobCreated, Mapping[str, Any], str]


async def _sleep(seconds: float, cancel_event: asyncio.Event | None) -> bool:
    """Sleep for `seconds`; return True if cancel_event fired first."""
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return False
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


class Job:
    """Client-side handle to one server-side job.

    WHY: Callers want `result = await (await client.protect(...)).wait()`
    without managing polling mechanics. Each Job owns its own state, so any
    number of them can share one HttpClient.

    HOW: Built from a job-creation response (JobCreated or its dict form)
    or from a bare id string to resume tracking an earlier job. Polls on
    the same instance are serialized by an asyncio.Lock.

    RULES:
    - id is immutable
    - latest starts as JobData(id, QUEUED)
    - done is True for COMPLETED and FAILED
    """

    def __init__(self, http: HttpClient, source: JobSource) -> None:
        if isinstance(source, str):
            created = JobCreated(job_id=source)
        elif isinstance(source, JobCreated):
            created = source
        else:
            created = JobCreated.from_dict(source)

        self._http = http
        self.id = created.job_id
        self.status_url = created.status_url
        self._latest = JobData(id=created.job_id, status=JobStatus.QUEUED)
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"Job(id={self.id!r}, status={self._latest.status.value!r})"

    @property
    def latest(self) -> JobData:
        """Most recently fetched job data."""
        return self._latest

    @property
    def done(self) -> bool:
        return self._latest.done

    @property
    def path(self) -> str:
        return "/api/v1/jobs/{}".format(quote(self.id, safe=""))

    async def poll(self) -> JobData:
        """Fetch the current job state and make it the latest state.

        RULES:
        - Exactly one network call
        - Replaces `latest` unconditionally, even after a terminal state
        - API errors propagate; `latest` is left untouched on failure
        """
        async with self._lock:
            payload = await self._http.get_one(self.path)
            fresh = JobData.from_dict({"id": self.id, **payload})
            if fresh.status is not self._latest.status:
                logger.debug(
                    "Job %s: %s -> %s", self.id, self._latest.status.value, fresh.status.value
                )
            self._latest = fresh
            return fresh

    async def wait(
        self,
        timeout_s: float = 120.0,
        interval_s: float = 2.0,
        cancel_event: asyncio.Event | None = None,
    ) -> JobData:
        """Poll until the job completes or fails, then return its final state.

        WHY: Most callers just want the result. wait() runs the poll loop
        with a total time budget so a stuck job cannot block forever.

        HOW: The deadline is fixed when wait() is called. Each iteration
        checks the deadline, sleeps `interval_s`, checks the deadline again,
        then polls. The deadline is only checked between steps, so a slow
        poll may overrun it by that poll's own duration.

        RULES:
        - Returns immediately, with no network call, if already done
        - At most one poll per interval
        - The first poll happens only after the first interval
        - Raises JobTimeoutError(job_id, timeout_s, last_status) on deadline
        - Raises JobCancelledError if cancel_event is set while sleeping

        Args:
            timeout_s: Total time budget in seconds (default: 120).
            interval_s: Delay between polls in seconds (default: 2).
            cancel_event: Optional event that aborts the wait when set.

        Returns:
            The terminal JobData (status COMPLETED or FAILED).
        """
        deadline = time.monotonic() + timeout_s

        while not self.done:
            self._check_deadline(deadline, timeout_s)
            if await _sleep(interval_s, cancel_event):
                logger.warning("Stopped waiting on job %s (cancelled)", self.id)
                raise JobCancelledError(self.id, self._latest.status.value)
            self._check_deadline(deadline, timeout_s)
            await self.poll()

        return self._latest

    def _check_deadline(self, deadline: float, timeout_s: float) -> None:
        if time.monotonic() >= deadline:
            logger.warning(
                "Job %s timed out after %gs (last status: %s)",
                self.id, timeout_s, self._latest.status.value,
            )
            raise JobTimeoutError(self.id, timeout_s, self._latest.status.value)

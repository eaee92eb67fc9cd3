"""Exception hierarchy for the Sidearm client.

WHY: Callers need to branch on *what* went wrong: a bad setup, a rejected
request, or a job that never finished. One root class lets them catch
everything from the SDK at once; the subclasses let them match precisely.

RULES:
- Every SDK exception derives from SidearmError
- A job whose server status is "failed" is NOT an exception
- Errors carry structured fields, not just a formatted message
"""

from __future__ import annotations

from typing import Any


class SidearmError(Exception):
    """Base class for all errors raised by the Sidearm client."""


class ConfigurationError(SidearmError, ValueError):
    """Raised at construction when the API key is missing or empty."""


class SidearmAPIError(SidearmError):
    """Raised when the Sidearm API returns a non-2xx response.

    HOW: Wraps the HTTP status code, a best-effort human message, and the
    decoded JSON body when the response had one.

    RULES:
    - message is body["message"], else body["error"], else the raw text
    - body is None when the response was not JSON
    """

    def __init__(self, status_code: int, message: str, body: Any = None) -> None:
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(f"Sidearm API error {status_code}: {message}")


class JobTimeoutError(SidearmError, TimeoutError):
    """Raised when Job.wait() passes its deadline before a terminal state."""

    def __init__(self, job_id: str, timeout_s: float, last_status: str) -> None:
        self.job_id = job_id
        self.timeout_s = timeout_s
        self.last_status = last_status
        super().__init__(
            f"Job {job_id} did not complete within {timeout_s:g}s "
            f"(last status: {last_status})"
        )


class JobCancelledError(SidearmError):
    """Raised when Job.wait() is stopped through its cancel_event."""

    def __init__(self, job_id: str, last_status: str) -> None:
        self.job_id = job_id
        self.last_status = last_status
        super().__init__(f"Waiting on job {job_id} was cancelled (last status: {last_status})")


class UnknownJobStatusError(SidearmError, ValueError):
    """Raised when the service reports a job status this client does not know.

    RULES:
    - Known statuses are queued, running, completed and failed
    - Carries the job id and the raw status string
    """

    def __init__(self, job_id: str, status: Any) -> None:
        self.job_id = job_id
        self.status = status
        super().__init__(
            f"Job {job_id} reported unknown status {status!r} "
            f"(expected one of: queued, running, completed, failed)"
        )

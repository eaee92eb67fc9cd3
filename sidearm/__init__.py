"""Sidearm — async Python client for the Sidearm media protection API.

WHY: The Sidearm service protects, fingerprints and detects media, mostly
through asynchronous jobs. This package gives Python callers one client
object for every endpoint and a Job handle that waits for results.

HOW: Two layers. sidearm.api holds the transport core (auth, errors,
envelopes) and the Job tracker. sidearm.resources maps each endpoint to a
method on top of it. Sidearm ties them together behind one async context
manager:

    async with Sidearm(api_key="sk_live_...") as client:
        job = await client.protect(media_url="https://...", level="maximum")
        result = await job.wait()

RULES:
- One HttpClient per Sidearm instance, shared by every resource and Job
- Use as: async with Sidearm(...) as client: ...
"""

from __future__ import annotations

from typing import Any

from sidearm.api import (
    ConfigurationError,
    HttpClient,
    Job,
    JobCancelledError,
    JobCreated,
    JobData,
    JobStatus,
    JobTimeoutError,
    Page,
    SidearmAPIError,
    SidearmError,
    UnknownJobStatusError,
)
from sidearm.resources import (
    AlgorithmsResource,
    BillingResource,
    DetectResource,
    JobsResource,
    MediaResource,
    ProtectResource,
    RightsResource,
    RunResource,
    SearchResource,
)

__version__ = "0.1.0"


class Sidearm:
    """Sidearm API client.

    RULES:
    - api_key defaults to SIDEARM_API_KEY; a missing key raises
      ConfigurationError here, before any network access
    - http_options (timeout, transport) are forwarded to HttpClient
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        **http_options: Any,
    ) -> None:
        self.http = HttpClient(api_key, base_url, **http_options)

        self.algorithms = AlgorithmsResource(self.http)
        self.jobs = JobsResource(self.http)
        self.search = SearchResource(self.http)
        self.detect = DetectResource(self.http)
        self.media = MediaResource(self.http)
        self.rights = RightsResource(self.http)
        self.billing = BillingResource(self.http)
        self._run = RunResource(self.http)
        self._protect = ProtectResource(self.http)

    async def __aenter__(self) -> Sidearm:
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.http.__aexit__(exc_type, exc_val, exc_tb)

    async def run(self, algorithms: list[str], **options: Any) -> Job:
        """Run one or more named algorithms on media. Returns a Job handle."""
        return await self._run.execute(algorithms, **options)

    async def protect(self, level: str | None = None, **options: Any) -> Job:
        """Protect media with a preset level. Returns a Job handle."""
        return await self._protect.execute(level, **options)


__all__ = [
    "ConfigurationError",
    "HttpClient",
    "Job",
    "JobCancelledError",
    "JobCreated",
    "JobData",
    "JobStatus",
    "JobTimeoutError",
    "Page",
    "Sidearm",
    "SidearmAPIError",
    "SidearmError",
    "UnknownJobStatusError",
]

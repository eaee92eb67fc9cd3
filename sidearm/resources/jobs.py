"""Job lookup and job-handle creation.

WHY: Endpoints that start asynchronous work return a job id. Callers that
stored an id earlier (or received one from a webhook) need a way to read
its state once, or to rebuild a Job handle and keep waiting on it.

RULES:
- get() is a single read and never mutates any Job handle
- handle() makes no network call
"""

from __future__ import annotations

from sidearm.api.job import Job
from sidearm.api.models import JobData
from sidearm.resources.base import Resource, segment


class JobsResource(Resource):
    async def get(self, job_id: str) -> JobData:
        """Get the current state of a job by id."""
        data = await self._http.get_one("/api/v1/jobs/{}".format(segment(job_id)))
        return JobData.from_dict({"id": job_id, **data})

    def handle(self, job_id: str) -> Job:
        """Create a Job handle from an existing job id to resume polling."""
        return Job(self._http, job_id)

"""Run named algorithms, or apply a curated protection preset."""

from __future__ import annotations

from typing import Any

from sidearm.api.job import Job
from sidearm.resources.base import Resource, compact


class RunResource(Resource):
    async def execute(self, algorithms: list[str], **options: Any) -> Job:
        """Run one or more named algorithms on media.

        Options mirror the API body: media_url, media, text, mime, tags,
        webhook_url, c2pa_wrap, filename.
        """
        res = await self._http.post(
            "/api/v1/run", compact(algorithms=algorithms, **options)
        )
        return Job(self._http, res)


class ProtectResource(Resource):
    async def execute(self, level: str | None = None, **options: Any) -> Job:
        """Protect media with a preset level ("standard" or "maximum")."""
        res = await self._http.post_one(
            "/api/v1/protect", compact(level=level, **options)
        )
        return Job(self._http, res)

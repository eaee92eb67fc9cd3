"""AI-content detection, fingerprint detection and membership inference."""

from __future__ import annotations

from typing import Any

from sidearm.api.job import Job
from sidearm.resources.base import Resource, compact


class DetectResource(Resource):
    async def ai(self, **options: Any) -> Job:
        """Detect whether media was AI-generated. Returns a Job handle."""
        res = await self._http.post("/api/v1/detect/ai", compact(**options))
        return Job(self._http, res)

    async def fingerprint(self, **options: Any) -> Any:
        """Synchronous fingerprint detection against the indexed library."""
        return await self._http.post("/api/v1/detect", compact(**options))

    async def membership(
        self,
        content_ids: list[str],
        suspect_model: str,
        **options: Any,
    ) -> Job:
        """Test whether content was used to train `suspect_model`. Returns a Job handle."""
        res = await self._http.post(
            "/api/v1/detect/membership",
            compact(content_ids=content_ids, suspect_model=suspect_model, **options),
        )
        return Job(self._http, res)

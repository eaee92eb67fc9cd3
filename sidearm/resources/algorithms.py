"""Algorithm catalogue."""

from __future__ import annotations

from sidearm.api.models import Algorithm
from sidearm.resources.base import Resource


class AlgorithmsResource(Resource):
    async def list(
        self,
        category: str | None = None,
        media_type: str | None = None,
    ) -> list[Algorithm]:
        """List available algorithms, optionally filtered by category or media type."""
        data = await self._http.get_one(
            "/api/v1/algorithms",
            {"category": category, "media_type": media_type},
        )
        return [Algorithm.from_dict(item) for item in data]

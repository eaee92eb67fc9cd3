"""Rights and licensing lookups."""

from __future__ import annotations

from typing import Any

from sidearm.resources.base import Resource, segment


class RightsResource(Resource):
    async def get(self, media_id: str) -> dict[str, Any]:
        """Get C2PA, IPTC, TDM and licensing information for a media asset."""
        return await self._http.get("/api/v1/rights/{}".format(segment(media_id)))

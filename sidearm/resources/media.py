"""Media library: register, list, fetch, update, delete, provenance.

WHY: Registered media is what search, detection and rights lookups work
against. Every call here is a single envelope-unwrapped request.

RULES:
- list() returns a Page whose items are Media objects
- delete() returns the server's confirmation dict (e.g. {"deleted": True})
"""

from __future__ import annotations

from typing import Any

from sidearm.api.models import Media, Page
from sidearm.resources.base import Resource, compact, segment


class MediaResource(Resource):
    def _path(self, media_id: str, suffix: str = "") -> str:
        return "/api/v1/media/{}{}".format(segment(media_id), suffix)

    async def register(self, **options: Any) -> Media:
        """Register and index media, optionally watermarking on ingest."""
        return Media.from_dict(await self._http.post_one("/api/v1/media", compact(**options)))

    async def list(self, cursor: str | None = None, limit: int | None = None) -> Page:
        page = await self._http.get_list("/api/v1/media", {"cursor": cursor, "limit": limit})
        return Page(data=[Media.from_dict(item) for item in page.data], cursor=page.cursor)

    async def get(self, media_id: str) -> Media:
        return Media.from_dict(await self._http.get_one(self._path(media_id)))

    async def update(self, media_id: str, original_media_url: str) -> Media:
        data = await self._http.patch_one(
            self._path(media_id), {"original_media_url": original_media_url}
        )
        return Media.from_dict(data)

    async def delete(self, media_id: str) -> dict[str, Any]:
        """Permanently delete a media asset and all associated data."""
        return await self._http.delete_one(self._path(media_id))

    async def provenance(self, media_id: str) -> dict[str, Any]:
        """Full provenance chain: algorithms applied, C2PA manifest, search matches."""
        return await self._http.get_one(self._path(media_id, "/provenance"))

    async def identify(self, media_url: str) -> dict[str, Any]:
        """Identify media by its embedded fingerprint and extract its C2PA chain."""
        return await self._http.post_one("/api/v1/media/identify", {"media_url": media_url})

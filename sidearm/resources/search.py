"""Similarity search across the caller's media library."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from sidearm.api.models import Page, SearchResponse
from sidearm.resources.base import Resource, compact


class SearchResource(Resource):
    async def run(
        self,
        tags: list[str] | None = None,
        limit: int | None = None,
        **options: Any,
    ) -> SearchResponse:
        """Run a similarity search. Results are returned immediately.

        `tags` scopes the search (sent as scope.tags); `limit` travels in
        the query string. Remaining options (media_url, media, type) form
        the request body.
        """
        payload = compact(**options)
        if tags:
            payload["scope"] = {"tags": tags}

        path = "/api/v1/search"
        if limit:
            path = "{}?{}".format(path, urlencode({"limit": limit}))

        return SearchResponse.from_dict(await self._http.post(path, payload))

    async def list(self, cursor: str | None = None, limit: int | None = None) -> Page:
        """List previous searches on the account."""
        return await self._http.get_list(
            "/api/v1/search", {"cursor": cursor, "limit": limit}
        )

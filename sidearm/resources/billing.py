"""Billing events and usage."""

from __future__ import annotations

from sidearm.api.models import BillingResponse
from sidearm.resources.base import Resource, segment


class BillingResource(Resource):
    async def get(
        self,
        account_id: str,
        start_date: str | None = None,
        end_date: str | None = None,
        type: str | None = None,  # noqa: A002
        tags: str | None = None,
    ) -> BillingResponse:
        data = await self._http.get(
            "/api/v1/billing/{}".format(segment(account_id)),
            {"start_date": start_date, "end_date": end_date, "type": type, "tags": tags},
        )
        return BillingResponse.from_dict(data)

"""Shared base for resource callers.

WHY: Every resource method is a thin mapping from a Python call to a verb,
a path and a parameter bag on the shared HttpClient. The base class holds
that client and the two helpers every resource needs.

RULES:
- Resources never talk to httpx directly; everything goes through HttpClient
- Path segments built from caller ids are always URL-quoted
- Options whose value is None are dropped before sending
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from sidearm.api.client import HttpClient


def compact(**options: Any) -> dict[str, Any]:
    """Return the keyword options with None values removed."""
    return {key: value for key, value in options.items() if value is not None}


def segment(value: str) -> str:
    """URL-quote one path segment."""
    return quote(str(value), safe="")


class Resource:
    """Base for the per-resource callers attached to the Sidearm facade."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

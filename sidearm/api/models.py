"""Sidearm API request and response dataclasses.

WHY: The Sidearm API wraps every payload in a JSON envelope and returns
plain objects for jobs, media, algorithms and billing. Typed dataclasses
make these structures explicit, enable IDE autocompletion, and keep the
envelope-handling code free of ad-hoc dict poking.

HOW: Each response dataclass maps to one Sidearm JSON object and exposes a
from_dict factory. Resource objects keep the full decoded payload in `raw`
so fields the service adds later are still reachable.

RULES:
- Optional wire fields default to None
- Unknown keys are ignored by from_dict (but preserved in `raw`)
- JobStatus "completed" and "failed" are terminal
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from sidearm.api.errors import UnknownJobStatusError


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RequestDescriptor:
    """One outgoing call: verb, path, query parameters, body, extra headers.

    RULES:
    - params entries whose value is None are omitted from the query string
    - body is only serialized for non-GET verbs, and only when not None
    - headers may add Content-Type but never replace the auth/accept headers
    """

    method: HttpMethod
    path: str
    params: Mapping[str, Any] | None = None
    body: Any = None
    headers: Mapping[str, str] | None = None

    @property
    def has_body(self) -> bool:
        return self.method is not HttpMethod.GET and self.body is not None


@dataclass
class Page:
    """One page of a paginated list.

    `cursor` is the server's `meta.next_cursor`; None when there is no
    further page or the envelope carried no `meta`.
    """

    data: list[Any]
    cursor: str | None = None


class JobStatus(str, enum.Enum):
    """Server-side states of an asynchronous job.

    HOW: Inherits from str so values compare equal to the wire strings.
    """

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class JobProgress:
    completed: int
    total: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobProgress:
        return cls(completed=data["completed"], total=data["total"])


@dataclass
class JobData:
    """State of a job as reported by GET /api/v1/jobs/{id}.

    WHY: The Job tracker replaces its latest-known state with one of these
    on every poll; callers inspect `status`, `result` and `error` once the
    job is terminal.

    RULES:
    - id and status are always present
    - result is the server's payload, untouched
    - error is only meaningful when status is FAILED
    - an unrecognised status raises UnknownJobStatusError; the set of
      statuses is closed, so a new server state needs a client update
    """

    id: str
    status: JobStatus
    type: str | None = None
    preset: str | None = None
    progress: JobProgress | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def done(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobData:
        progress = data.get("progress")
        try:
            status = JobStatus(data["status"])
        except ValueError:
            raise UnknownJobStatusError(data["id"], data["status"]) from None
        return cls(
            id=data["id"],
            status=status,
            type=data.get("type"),
            preset=data.get("preset"),
            progress=JobProgress.from_dict(progress) if progress else None,
            result=data.get("result"),
            error=data.get("error"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class JobCreated:
    """Response of an endpoint that starts asynchronous work."""

    job_id: str
    status_url: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobCreated:
        return cls(job_id=data["job_id"], status_url=data.get("status_url"))


@dataclass
class Algorithm:
    """An algorithm listed by GET /api/v1/algorithms."""

    id: str
    name: str
    category: str
    media_types: list[str] = field(default_factory=list)
    summary: str = ""
    description: str = ""
    technique: str = ""
    gpu_required: bool = False
    paper_url: str | None = None
    runnable: bool | None = None
    resolves_to: list[str] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Algorithm:
        return cls(
            id=data["id"],
            name=data["name"],
            category=data["category"],
            media_types=list(data.get("media_types") or []),
            summary=data.get("summary", ""),
            description=data.get("description", ""),
            technique=data.get("technique", ""),
            gpu_required=bool(data.get("gpu_required", False)),
            paper_url=data.get("paper_url"),
            runnable=data.get("runnable"),
            resolves_to=list(data.get("resolves_to") or []),
            raw=dict(data),
        )


@dataclass
class Media:
    """A media asset registered in the caller's library.

    RULES:
    - status is "active" or "processing"
    - storage fields are absent until ingest finishes
    """

    id: str
    media_type: str
    status: str
    account_id: str | None = None
    manifest: str | None = None
    storage_url: str | None = None
    original_storage_key: str | None = None
    preset: str | None = None
    algorithms_applied: list[str] = field(default_factory=list)
    deletes_at: str | None = None
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Media:
        return cls(
            id=data["id"],
            media_type=data["media_type"],
            status=data["status"],
            account_id=data.get("account_id"),
            manifest=data.get("manifest"),
            storage_url=data.get("storage_url"),
            original_storage_key=data.get("original_storage_key"),
            preset=data.get("preset"),
            algorithms_applied=list(data.get("algorithms_applied") or []),
            deletes_at=data.get("deletes_at"),
            tags=list(data.get("tags") or []),
            metadata=dict(data.get("metadata") or {}),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            raw=dict(data),
        )


@dataclass
class SearchResult:
    media_id: str
    score: float
    tier: str
    media: Media | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchResult:
        media = data.get("media")
        return cls(
            media_id=data["media_id"],
            score=data["score"],
            tier=data["tier"],
            media=Media.from_dict(media) if media else None,
            raw=dict(data),
        )


@dataclass
class SearchResponse:
    results: list[SearchResult]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchResponse:
        return cls(
            results=[SearchResult.from_dict(r) for r in data.get("results") or []],
            raw=dict(data),
        )


@dataclass
class BillingEvent:
    id: str
    type: str
    created_at: str
    credits: float | None = None
    tags: list[str] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BillingEvent:
        return cls(
            id=data["id"],
            type=data["type"],
            created_at=data["created_at"],
            credits=data.get("credits"),
            tags=list(data.get("tags") or []),
            raw=dict(data),
        )


@dataclass
class BillingResponse:
    """Billing events for an account, plus the customer-portal link."""

    events: list[BillingEvent]
    portal_url: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BillingResponse:
        return cls(
            events=[BillingEvent.from_dict(e) for e in data.get("events") or []],
            portal_url=data.get("portal_url"),
        )

"""Sidearm API core — transport pipeline, job tracker, models and errors.

WHY: Every resource call needs the same auth, error classification and
envelope unwrapping, and every asynchronous endpoint needs the same
poll/wait mechanics. This package holds exactly those two pieces.

RULES:
- All HTTP calls go through HttpClient (no direct httpx usage elsewhere)
- Job talks to the service only through HttpClient.get_one
"""

from sidearm.api.client import HttpClient
from sidearm.api.errors import (
    ConfigurationError,
    JobCancelledError,
    JobTimeoutError,
    SidearmAPIError,
    SidearmError,
    UnknownJobStatusError,
)
from sidearm.api.job import Job
from sidearm.api.models import JobCreated, JobData, JobStatus, Page, RequestDescriptor

__all__ = [
    "ConfigurationError",
    "HttpClient",
    "Job",
    "JobCancelledError",
    "JobCreated",
    "JobData",
    "JobStatus",
    "JobTimeoutError",
    "Page",
    "RequestDescriptor",
    "SidearmAPIError",
    "SidearmError",
    "UnknownJobStatusError",
]

"""Per-resource callers built on the shared HttpClient.

RULES:
- Each resource is constructed with the facade's single HttpClient
- Job-returning methods hand back a Job, never a raw job id
"""

from sidearm.resources.algorithms import AlgorithmsResource
from sidearm.resources.billing import BillingResource
from sidearm.resources.detect import DetectResource
from sidearm.resources.jobs import JobsResource
from sidearm.resources.media import MediaResource
from sidearm.resources.rights import RightsResource
from sidearm.resources.run import ProtectResource, RunResource
from sidearm.resources.search import SearchResource

__all__ = [
    "AlgorithmsResource",
    "BillingResource",
    "DetectResource",
    "JobsResource",
    "MediaResource",
    "ProtectResource",
    "RightsResource",
    "RunResource",
    "SearchResource",
]

"""Enrichment source implementations."""

from .orcid import ORCIDSource, get_person_from_orcid
from .pypi import PyPIReleaseSource, get_first_release_date
from .ror import RORSource, get_organisation_from_ror
from .workflows import WorkflowOSSource, get_os_from_workflows

__all__ = [
    "ORCIDSource",
    "PyPIReleaseSource",
    "RORSource",
    "WorkflowOSSource",
    "get_first_release_date",
    "get_organisation_from_ror",
    "get_os_from_workflows",
    "get_person_from_orcid",
]

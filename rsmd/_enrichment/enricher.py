"""Enricher: gathers every external lookup a crosswalk run needs.

All lookups finish before canonicalisation starts, so the merge never sees
partial enrichment results.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional

import requests

from rsmd._crosswalk.fs import FileAccess
from rsmd._crosswalk.record import Organization, PartialRecord, Person
from rsmd._crosswalk.utils import normalize_ror
from rsmd.http_client import create_session
from rsmd.logging_config import logger

from .sources import ORCIDSource, PyPIReleaseSource, RORSource, WorkflowOSSource

# Formats consulted, in order, for the package name used on PyPI
NAME_SOURCES = ("manifest", "codemeta", "zenodo")


@dataclass
class EnrichmentResult:
    """
    Results of all external lookups for one run.

    ``persons`` and ``organizations`` map every identifier that was looked
    up to its result; None records a lookup that found no match.
    """

    persons: Dict[str, Optional[Person]] = field(default_factory=dict)
    organizations: Dict[str, Optional[Organization]] = field(default_factory=dict)
    first_release_date: Optional[date] = None
    operating_systems: List[str] = field(default_factory=list)


def collect_identifiers(partials: Mapping[str, PartialRecord]) -> tuple[List[str], List[str]]:
    """Return (ORCID iDs, ROR ids) mentioned by any source, first-seen order."""
    orcids: List[str] = []
    rors: List[str] = []
    for partial in partials.values():
        for person in partial.authors or []:
            if person.identifier and person.identifier not in orcids:
                orcids.append(person.identifier)
            if person.affiliation and person.affiliation.identifier and person.affiliation.identifier not in rors:
                rors.append(person.affiliation.identifier)
    return orcids, rors


class Enricher:
    """
    Main class for external metadata lookups.

    Example:
        with Enricher() as enricher:
            result = enricher.enrich(partials, fs)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        offline: bool = False,
        ror: Optional[RORSource] = None,
        orcid: Optional[ORCIDSource] = None,
        pypi: Optional[PyPIReleaseSource] = None,
        workflows: Optional[WorkflowOSSource] = None,
    ) -> None:
        """
        Initialize the Enricher.

        Args:
            session: Optional requests.Session; one is created lazily if omitted
            offline: Skip every network lookup (workflow inference still runs)
        """
        self._session = session
        self._owns_session = session is None
        self.offline = offline
        self.ror = ror or RORSource()
        self.orcid = orcid or ORCIDSource()
        self.pypi = pypi or PyPIReleaseSource()
        self.workflows = workflows or WorkflowOSSource()

    def _get_session(self) -> requests.Session:
        """Get or create a requests session."""
        if self._session is None:
            self._session = create_session()
        return self._session

    def close(self) -> None:
        """Close the requests session if this enricher created it."""
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "Enricher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def lookup_person(self, orcid: str) -> Optional[Person]:
        return self.orcid.fetch(orcid, self._get_session())

    def lookup_organization(self, ror_id: str) -> Optional[Organization]:
        return self.ror.fetch(ror_id, self._get_session())

    def first_release_date(self, package_name: str) -> Optional[date]:
        return self.pypi.fetch(package_name, self._get_session())

    def operating_systems(self, fs: FileAccess) -> List[str]:
        return self.workflows.fetch(fs)

    def enrich(self, partials: Mapping[str, PartialRecord], fs: FileAccess) -> EnrichmentResult:
        """
        Run every lookup the extracted records call for.

        - ORCID lookups for every author identifier
        - ROR lookups for every affiliation identifier, including those
          reported by ORCID
        - PyPI first release date, only when no file records one
        - operating systems from CI workflows
        """
        result = EnrichmentResult(operating_systems=self.operating_systems(fs))
        if self.offline:
            logger.info("Offline mode: skipping ROR, ORCID and PyPI lookups")
            return result

        orcids, rors = collect_identifiers(partials)
        for orcid in orcids:
            person = self.lookup_person(orcid)
            result.persons[orcid] = person
            if person and person.affiliation and person.affiliation.identifier:
                ror_id = normalize_ror(person.affiliation.identifier)
                if ror_id and ror_id not in rors:
                    rors.append(ror_id)
        for ror_id in rors:
            result.organizations[ror_id] = self.lookup_organization(ror_id)

        if not any(partial.first_release_date for partial in partials.values()):
            package_name = next(
                (partials[n].name for n in NAME_SOURCES if n in partials and partials[n].name),
                None,
            )
            if package_name:
                result.first_release_date = self.first_release_date(package_name)

        found = sum(1 for p in result.persons.values() if p) + sum(1 for o in result.organizations.values() if o)
        logger.info(f"Enrichment complete: {found}/{len(result.persons) + len(result.organizations)} identifiers resolved")
        return result

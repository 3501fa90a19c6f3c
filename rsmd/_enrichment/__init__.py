"""External metadata lookups used to fill gaps during a crosswalk.

Sources:
- ror.org: organisation name and country by ROR identifier
- orcid.org: researcher name and employer by ORCID iD
- pypi.org: date of the first published release
- .github/workflows: operating systems exercised by CI

Every source is best-effort: an unknown identifier or an unreachable
service yields "no match" and never aborts a run.
"""

from .enricher import EnrichmentResult, Enricher, collect_identifiers

__all__ = [
    "EnrichmentResult",
    "Enricher",
    "collect_identifiers",
]

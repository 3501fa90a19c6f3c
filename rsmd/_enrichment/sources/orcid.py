"""ORCID data source for researcher metadata."""

import json
from typing import Any, Dict, List, Optional

import requests

from rsmd._crosswalk.record import Organization, Person
from rsmd._crosswalk.utils import is_valid_orcid, join_name, normalize_orcid, normalize_ror
from rsmd.http_client import DEFAULT_TIMEOUT, create_session, get_default_headers
from rsmd.logging_config import logger

ORCID_API_BASE = "https://pub.orcid.org/v3.0"


def _value(node: Optional[Dict[str, Any]]) -> Optional[str]:
    """ORCID wraps scalars as {"value": ...}; any level may be null."""
    if not isinstance(node, dict):
        return None
    value = node.get("value")
    return value.strip() if isinstance(value, str) and value.strip() else None


class ORCIDSource:
    """
    Data source for researchers registered with orcid.org (public API).

    Provides the researcher's name and current employer. Returns None
    ("no match") for unknown iDs and for transport failures.
    """

    @property
    def name(self) -> str:
        return "orcid.org"

    def fetch(self, orcid: str, session: requests.Session) -> Optional[Person]:
        """
        Fetch a researcher record from the ORCID public API.

        Args:
            orcid: ORCID iD, bare or as https://orcid.org/ URL
            session: requests.Session with configured headers

        Returns:
            Person if found, None otherwise
        """
        identifier = normalize_orcid(orcid)
        if not identifier or not is_valid_orcid(identifier):
            logger.debug(f"Not a valid ORCID iD: {orcid}")
            return None

        try:
            url = f"{ORCID_API_BASE}/{identifier}/record"
            logger.debug(f"Fetching ORCID record for: {identifier}")
            response = session.get(url, headers=get_default_headers(accept="application/json"), timeout=DEFAULT_TIMEOUT)

            if response.status_code == 200:
                return self._normalize_response(identifier, response.json())
            elif response.status_code == 404:
                logger.debug(f"Researcher not found on ORCID: {identifier}")
            else:
                logger.warning(f"Failed to fetch ORCID record for {identifier}: HTTP {response.status_code}")
            return None

        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching ORCID record for {identifier}")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching ORCID record for {identifier}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"JSON decode error for ORCID {identifier}: {e}")
            return None

    def _normalize_response(self, identifier: str, data: Dict[str, Any]) -> Person:
        """
        Normalize an ORCID v3.0 record.

        Name: given + family names, falling back to the credit name.
        Affiliation: first current employment (no end date), else the first
        employment listed.
        """
        name_node = (data.get("person") or {}).get("name") or {}
        name = join_name(_value(name_node.get("given-names")), _value(name_node.get("family-name")))
        if not name:
            name = _value(name_node.get("credit-name"))

        affiliation = self._current_employer(data)
        logger.debug(f"Successfully fetched ORCID record for: {identifier}")
        return Person(name=name, identifier=identifier, affiliation=affiliation)

    def _current_employer(self, data: Dict[str, Any]) -> Optional[Organization]:
        employments = ((data.get("activities-summary") or {}).get("employments") or {}).get("affiliation-group") or []
        summaries: List[Dict[str, Any]] = []
        for group in employments:
            for summary in group.get("summaries") or []:
                employment = summary.get("employment-summary")
                if employment:
                    summaries.append(employment)
        if not summaries:
            return None

        current = [s for s in summaries if not s.get("end-date")]
        chosen = (current or summaries)[0]
        organization = chosen.get("organization") or {}
        if not organization.get("name"):
            return None

        ror_id = None
        disambiguated = organization.get("disambiguated-organization") or {}
        if disambiguated.get("disambiguation-source") == "ROR":
            ror_id = normalize_ror(disambiguated.get("disambiguated-organization-identifier"))
        return Organization(name=organization["name"], identifier=ror_id)


def get_person_from_orcid(orcid: str, session: Optional[requests.Session] = None) -> Optional[Person]:
    """
    Look up a researcher by ORCID iD.

    Returns None if no such researcher exists or ORCID is unreachable.
    """
    if session is not None:
        return ORCIDSource().fetch(orcid, session)
    with create_session() as own_session:
        return ORCIDSource().fetch(orcid, own_session)

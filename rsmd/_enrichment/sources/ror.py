"""ROR (Research Organization Registry) data source for organisation metadata."""

import json
from typing import Any, Dict, Optional

import requests

from rsmd._crosswalk.record import Organization
from rsmd._crosswalk.utils import is_valid_ror, normalize_ror
from rsmd.http_client import DEFAULT_TIMEOUT, create_session
from rsmd.logging_config import logger

ROR_API_BASE = "https://api.ror.org/v2/organizations"


class RORSource:
    """
    Data source for organisations registered with ror.org.

    Returns None ("no match") both when the identifier is unknown and when
    the registry cannot be reached.
    """

    @property
    def name(self) -> str:
        return "ror.org"

    def fetch(self, ror_id: str, session: requests.Session) -> Optional[Organization]:
        """
        Fetch an organisation from the ROR API.

        Args:
            ror_id: ROR identifier, bare or as https://ror.org/ URL
            session: requests.Session with configured headers

        Returns:
            Organization if found, None otherwise
        """
        identifier = normalize_ror(ror_id)
        if not identifier or not is_valid_ror(identifier):
            logger.debug(f"Not a valid ROR identifier: {ror_id}")
            return None

        try:
            url = f"{ROR_API_BASE}/{identifier}"
            logger.debug(f"Fetching ROR record for: {identifier}")
            response = session.get(url, timeout=DEFAULT_TIMEOUT)

            if response.status_code == 200:
                return self._normalize_response(identifier, response.json())
            elif response.status_code == 404:
                logger.debug(f"Organisation not found on ROR: {identifier}")
            else:
                logger.warning(f"Failed to fetch ROR record for {identifier}: HTTP {response.status_code}")
            return None

        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching ROR record for {identifier}")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching ROR record for {identifier}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"JSON decode error for ROR {identifier}: {e}")
            return None

    def _normalize_response(self, identifier: str, data: Dict[str, Any]) -> Optional[Organization]:
        """
        Normalize a ROR API response (schema v2, with v1 fallbacks).

        Args:
            identifier: Bare ROR identifier
            data: Raw ROR JSON response

        Returns:
            Organization with name and country
        """
        name = None
        for entry in data.get("names") or []:
            if "ror_display" in (entry.get("types") or []):
                name = entry.get("value")
                break
        if not name:
            name = data.get("name")

        country = None
        locations = data.get("locations") or []
        if locations:
            country = (locations[0].get("geonames_details") or {}).get("country_name")
        if not country:
            country = (data.get("country") or {}).get("country_name")

        if not name:
            logger.debug(f"ROR record {identifier} has no display name")
            return None

        logger.debug(f"Successfully fetched ROR record for: {identifier}")
        return Organization(name=name, identifier=identifier, country=country)


def get_organisation_from_ror(ror: str, session: Optional[requests.Session] = None) -> Optional[Organization]:
    """
    Look up an organisation by ROR identifier.

    Returns None if no such organisation exists or the registry is unreachable.
    """
    if session is not None:
        return RORSource().fetch(ror, session)
    with create_session() as own_session:
        return RORSource().fetch(ror, own_session)

"""PyPI data source for the first publication date of a package."""

import json
from datetime import date, datetime
from typing import Any, Dict, Optional

import requests

from rsmd.http_client import DEFAULT_TIMEOUT, create_session
from rsmd.logging_config import logger

PYPI_API_BASE = "https://pypi.org/pypi"


class PyPIReleaseSource:
    """
    Data source for release history on PyPI.

    A package that has never been published is treated as released today.
    Transport failures return None so the caller leaves the field unset.
    """

    @property
    def name(self) -> str:
        return "pypi.org"

    def fetch(self, package_name: str, session: requests.Session) -> Optional[date]:
        """
        Fetch the date of the earliest upload of any release.

        Args:
            package_name: Distribution name as published on PyPI
            session: requests.Session with configured headers

        Returns:
            Date of the first release, today if unregistered, None on failure
        """
        try:
            url = f"{PYPI_API_BASE}/{package_name}/json"
            logger.debug(f"Fetching PyPI release history for: {package_name}")
            response = session.get(url, timeout=DEFAULT_TIMEOUT)

            if response.status_code == 200:
                return self._first_release(package_name, response.json())
            elif response.status_code == 404:
                logger.info(f"{package_name} is not registered on PyPI; treating it as released today")
                return date.today()
            else:
                logger.warning(f"Failed to fetch PyPI metadata for {package_name}: HTTP {response.status_code}")
            return None

        except requests.exceptions.Timeout:
            logger.warning(f"Timeout fetching PyPI metadata for {package_name}")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching PyPI metadata for {package_name}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"JSON decode error for PyPI {package_name}: {e}")
            return None

    def _first_release(self, package_name: str, data: Dict[str, Any]) -> date:
        earliest: Optional[datetime] = None
        for files in (data.get("releases") or {}).values():
            for file_info in files or []:
                uploaded = file_info.get("upload_time_iso_8601") or file_info.get("upload_time")
                if not uploaded:
                    continue
                try:
                    timestamp = datetime.fromisoformat(uploaded.replace("Z", "+00:00"))
                except ValueError:
                    logger.debug(f"Ignoring unparseable upload time {uploaded!r} for {package_name}")
                    continue
                if timestamp.tzinfo is not None:
                    timestamp = timestamp.replace(tzinfo=None)
                if earliest is None or timestamp < earliest:
                    earliest = timestamp

        if earliest is None:
            logger.info(f"{package_name} has no uploaded files on PyPI; treating it as released today")
            return date.today()
        logger.debug(f"First PyPI release of {package_name}: {earliest.date().isoformat()}")
        return earliest.date()


def get_first_release_date(package_name: str, session: Optional[requests.Session] = None) -> Optional[date]:
    """
    Return the first release date of a package on PyPI.

    Returns today's date if the package has not been registered yet.
    """
    if session is not None:
        return PyPIReleaseSource().fetch(package_name, session)
    with create_session() as own_session:
        return PyPIReleaseSource().fetch(package_name, own_session)

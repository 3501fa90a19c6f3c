"""Tests for the ROR, ORCID, PyPI and workflow enrichment sources."""

import json
from datetime import date
from unittest.mock import Mock

import pytest
import requests

from rsmd._crosswalk.fs import MemoryFileAccess
from rsmd._crosswalk.record import Organization, PartialRecord, Person
from rsmd._enrichment import Enricher, collect_identifiers
from rsmd._enrichment.sources import ORCIDSource, PyPIReleaseSource, RORSource, WorkflowOSSource
from rsmd._enrichment.sources.workflows import runner_operating_system


@pytest.fixture
def mock_session():
    """Create a mock requests session."""
    return Mock(spec=requests.Session)


def _response(status_code, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


ROR_V2 = {
    "id": "https://ror.org/052gg0110",
    "names": [
        {"value": "Oxford University", "types": ["alias"]},
        {"value": "University of Oxford", "types": ["ror_display", "label"]},
    ],
    "locations": [{"geonames_details": {"country_name": "United Kingdom", "name": "Oxford"}}],
}

ORCID_RECORD = {
    "person": {
        "name": {
            "given-names": {"value": "Ada"},
            "family-name": {"value": "Lovelace"},
            "credit-name": None,
        }
    },
    "activities-summary": {
        "employments": {
            "affiliation-group": [
                {
                    "summaries": [
                        {
                            "employment-summary": {
                                "end-date": {"year": {"value": "2019"}},
                                "organization": {"name": "Old College"},
                            }
                        }
                    ]
                },
                {
                    "summaries": [
                        {
                            "employment-summary": {
                                "end-date": None,
                                "organization": {
                                    "name": "University of Oxford",
                                    "disambiguated-organization": {
                                        "disambiguated-organization-identifier": "https://ror.org/052gg0110",
                                        "disambiguation-source": "ROR",
                                    },
                                },
                            }
                        }
                    ]
                },
            ]
        }
    },
}


class TestRORSource:
    def test_source_name(self):
        assert RORSource().name == "ror.org"

    def test_fetch_v2_record(self, mock_session):
        mock_session.get.return_value = _response(200, ROR_V2)

        organization = RORSource().fetch("https://ror.org/052gg0110", mock_session)

        assert organization == Organization(name="University of Oxford", identifier="052gg0110", country="United Kingdom")
        assert mock_session.get.call_args[0][0] == "https://api.ror.org/v2/organizations/052gg0110"

    def test_fetch_v1_record(self, mock_session):
        mock_session.get.return_value = _response(200, {"name": "CERN", "country": {"country_name": "Switzerland"}})

        organization = RORSource().fetch("01ggx4157", mock_session)

        assert organization.name == "CERN"
        assert organization.country == "Switzerland"

    def test_not_found_is_no_match(self, mock_session):
        mock_session.get.return_value = _response(404)
        assert RORSource().fetch("052gg0110", mock_session) is None

    def test_invalid_identifier_skips_request(self, mock_session):
        assert RORSource().fetch("not-a-ror", mock_session) is None
        mock_session.get.assert_not_called()

    def test_transport_failure_is_no_match(self, mock_session):
        mock_session.get.side_effect = requests.exceptions.ConnectionError("offline")
        assert RORSource().fetch("052gg0110", mock_session) is None

    def test_bad_json_is_no_match(self, mock_session):
        response = _response(200)
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
        mock_session.get.return_value = response
        assert RORSource().fetch("052gg0110", mock_session) is None


class TestORCIDSource:
    def test_fetch_prefers_current_employment(self, mock_session):
        mock_session.get.return_value = _response(200, ORCID_RECORD)

        person = ORCIDSource().fetch("0000-0002-1825-0097", mock_session)

        assert person.name == "Ada Lovelace"
        assert person.identifier == "0000-0002-1825-0097"
        assert person.affiliation == Organization(name="University of Oxford", identifier="052gg0110")

    def test_requests_json(self, mock_session):
        mock_session.get.return_value = _response(404)

        assert ORCIDSource().fetch("https://orcid.org/0000-0002-1825-0097", mock_session) is None

        args, kwargs = mock_session.get.call_args
        assert args[0] == "https://pub.orcid.org/v3.0/0000-0002-1825-0097/record"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert kwargs["timeout"] == 10

    def test_credit_name_fallback(self, mock_session):
        mock_session.get.return_value = _response(200, {"person": {"name": {"credit-name": {"value": "A. A. Lovelace"}}}})

        person = ORCIDSource().fetch("0000-0002-1825-0097", mock_session)

        assert person.name == "A. A. Lovelace"
        assert person.affiliation is None

    def test_timeout_is_no_match(self, mock_session):
        mock_session.get.side_effect = requests.exceptions.Timeout()
        assert ORCIDSource().fetch("0000-0002-1825-0097", mock_session) is None


class TestPyPIReleaseSource:
    def test_earliest_upload(self, mock_session):
        mock_session.get.return_value = _response(
            200,
            {
                "releases": {
                    "0.2.0": [{"upload_time_iso_8601": "2021-06-01T12:00:00.000000Z"}],
                    "0.1.0": [{"upload_time_iso_8601": "2020-02-03T08:30:00.000000Z"}],
                    "0.0.1": [],
                }
            },
        )
        assert PyPIReleaseSource().fetch("stellarpy", mock_session) == date(2020, 2, 3)

    def test_unregistered_package_is_released_today(self, mock_session):
        mock_session.get.return_value = _response(404)
        assert PyPIReleaseSource().fetch("stellarpy", mock_session) == date.today()

    def test_server_error_leaves_date_unset(self, mock_session):
        mock_session.get.return_value = _response(503)
        assert PyPIReleaseSource().fetch("stellarpy", mock_session) is None


WORKFLOW = """
name: tests
on: [push]
jobs:
  test:
    runs-on: ${{ matrix.os }}
    strategy:
      matrix:
        os: [ubuntu-latest, macos-14]
        include:
          - os: windows-2022
  lint:
    runs-on: ubuntu-22.04
"""


class TestWorkflowOSSource:
    @pytest.mark.parametrize(
        "label, expected",
        [("ubuntu-latest", "Linux"), ("macos-13", "macOS"), ("windows-latest", "Windows"), ("self-hosted", None)],
    )
    def test_runner_labels(self, label, expected):
        assert runner_operating_system(label) == expected

    def test_matrix_and_include(self):
        fs = MemoryFileAccess({".github/workflows/ci.yml": WORKFLOW})
        assert WorkflowOSSource().fetch(fs) == ["Linux", "Windows", "macOS"]

    def test_no_workflows(self):
        assert WorkflowOSSource().fetch(MemoryFileAccess()) == []

    def test_unparseable_workflow_is_skipped(self):
        fs = MemoryFileAccess(
            {
                ".github/workflows/broken.yaml": "jobs: [unclosed",
                ".github/workflows/ok.yml": "jobs:\n  build:\n    runs-on: windows-latest\n",
            }
        )
        assert WorkflowOSSource().fetch(fs) == ["Windows"]


class TestEnricher:
    def setup_method(self):
        self.partials = {
            "manifest": PartialRecord(name="stellarpy"),
            "codemeta": PartialRecord(
                authors=[Person(name="Ada Lovelace", identifier="0000-0002-1825-0097", affiliation=Organization(identifier="01ggx4157"))]
            ),
        }

    def test_collect_identifiers(self):
        assert collect_identifiers(self.partials) == (["0000-0002-1825-0097"], ["01ggx4157"])

    def test_enrich_follows_orcid_affiliations(self):
        ror, orcid, pypi = Mock(spec=RORSource), Mock(spec=ORCIDSource), Mock(spec=PyPIReleaseSource)
        orcid.fetch.return_value = Person(
            name="Ada Lovelace", identifier="0000-0002-1825-0097", affiliation=Organization(name="Oxford", identifier="052gg0110")
        )
        ror.fetch.side_effect = lambda ror_id, session: Organization(name=ror_id, identifier=ror_id)
        pypi.fetch.return_value = date(2020, 1, 1)

        with Enricher(session=Mock(spec=requests.Session), ror=ror, orcid=orcid, pypi=pypi) as enricher:
            result = enricher.enrich(self.partials, MemoryFileAccess())

        assert set(result.organizations) == {"01ggx4157", "052gg0110"}
        assert result.persons["0000-0002-1825-0097"].name == "Ada Lovelace"
        assert result.first_release_date == date(2020, 1, 1)
        pypi.fetch.assert_called_once()
        assert pypi.fetch.call_args[0][0] == "stellarpy"

    def test_offline_skips_network(self):
        ror, orcid, pypi = Mock(spec=RORSource), Mock(spec=ORCIDSource), Mock(spec=PyPIReleaseSource)
        fs = MemoryFileAccess({".github/workflows/ci.yml": WORKFLOW})

        result = Enricher(offline=True, ror=ror, orcid=orcid, pypi=pypi).enrich(self.partials, fs)

        assert result.persons == {}
        assert result.operating_systems == ["Linux", "Windows", "macOS"]
        ror.fetch.assert_not_called()
        orcid.fetch.assert_not_called()
        pypi.fetch.assert_not_called()

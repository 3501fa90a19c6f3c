"""Tests for http_client module."""

import re
import unittest

import requests

from rsmd.http_client import DEFAULT_TIMEOUT, USER_AGENT, create_session, get_default_headers


class TestUserAgent(unittest.TestCase):
    """Tests for USER_AGENT constant."""

    def test_user_agent_format(self):
        self.assertTrue(USER_AGENT.startswith("rsmd/"))
        self.assertIn("(+https://", USER_AGENT)

    def test_user_agent_has_version(self):
        # Format: rsmd/X.Y.Z (+url)
        version_part = USER_AGENT.split("/", 1)[1].split(" ")[0]
        version_pattern = r"^\d+\.\d+(\.\d+)?(-[\w.]+)?$"
        self.assertTrue(
            re.match(version_pattern, version_part) or version_part == "unknown",
            f"Version '{version_part}' is neither a valid version pattern nor 'unknown'",
        )


class TestGetDefaultHeaders(unittest.TestCase):
    """Tests for get_default_headers function."""

    def test_default_headers_minimal(self):
        headers = get_default_headers()
        self.assertEqual(headers, {"User-Agent": USER_AGENT})

    def test_default_headers_with_accept(self):
        headers = get_default_headers(accept="application/json")
        self.assertEqual(headers["Accept"], "application/json")
        self.assertEqual(headers["User-Agent"], USER_AGENT)


class TestCreateSession(unittest.TestCase):
    def test_session_carries_user_agent(self):
        with create_session() as session:
            self.assertIsInstance(session, requests.Session)
            self.assertEqual(session.headers["User-Agent"], USER_AGENT)

    def test_timeout_is_bounded(self):
        self.assertEqual(DEFAULT_TIMEOUT, 10)

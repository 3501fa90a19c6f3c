"""Tests for the console module."""

import unittest
from unittest.mock import patch

from rsmd import console as console_module
from rsmd._crosswalk.diagnostics import Diagnostics
from rsmd.console import console, gha_error, gha_group, gha_warning, print_diagnostics, print_written_files


class TestConsoleOutput(unittest.TestCase):
    def test_diagnostics_table(self):
        diagnostics = Diagnostics()
        diagnostics.warning("zenodo name differs", "name")
        diagnostics.error("Version mismatch", "version")

        with patch.object(console_module, "IS_GITHUB_ACTIONS", False), console.capture() as capture:
            print_diagnostics(diagnostics)

        output = capture.get()
        self.assertIn("Metadata Diagnostics", output)
        self.assertIn("zenodo name differs", output)
        self.assertIn("version", output)

    def test_no_diagnostics(self):
        with console.capture() as capture:
            print_diagnostics(Diagnostics())
        self.assertIn("No metadata inconsistencies", capture.get())

    def test_written_files(self):
        with patch.object(console_module, "IS_GITHUB_ACTIONS", False), console.capture() as capture:
            print_written_files(["codemeta.json", ".zenodo.json"])
        self.assertIn(".zenodo.json", capture.get())


class TestGitHubAnnotations(unittest.TestCase):
    @patch.object(console_module, "IS_GITHUB_ACTIONS", True)
    def test_annotations(self):
        with patch("builtins.print") as mock_print:
            gha_warning("check keywords", title="keywords")
            gha_error("Version mismatch")
        mock_print.assert_any_call("::warning title=keywords::check keywords")
        mock_print.assert_any_call("::error::Version mismatch")

    @patch.object(console_module, "IS_GITHUB_ACTIONS", True)
    def test_group(self):
        with patch("builtins.print") as mock_print:
            with gha_group("Updated files"):
                pass
        mock_print.assert_any_call("::group::Updated files")
        mock_print.assert_any_call("::endgroup::")

    @patch.object(console_module, "IS_GITHUB_ACTIONS", True)
    def test_diagnostics_become_annotations(self):
        diagnostics = Diagnostics()
        diagnostics.error("Version mismatch", "version")
        with patch("builtins.print") as mock_print, console.capture():
            print_diagnostics(diagnostics)
        mock_print.assert_any_call("::error title=version::Version mismatch")

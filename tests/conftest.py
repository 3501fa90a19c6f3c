"""Pytest configuration and shared fixtures for all tests."""

import pytest

from rsmd._crosswalk.fs import MemoryFileAccess

MANIFEST = """\
[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "stellarpy"
version = "1.2.0"
description = "Tools for stellar spectra"
license = "MIT"
authors = [
    { name = "Ada Lovelace", email = "ada@example.org" },
]
keywords = ["astronomy"]

[project.urls]
Repository = "https://github.com/example/stellarpy"

# Tool settings below are not metadata and must survive rewrites
[tool.ruff]
line-length = 100
"""

MIT_LICENSE = """MIT License

Copyright (c) 2024 Ada Lovelace

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software.
"""


@pytest.fixture(autouse=True)
def disable_sentry_for_tests(monkeypatch):
    """Disable Sentry telemetry for all tests.

    Tests that specifically need to test Sentry functionality should
    override this by setting TELEMETRY=true in their own patches.
    """
    monkeypatch.setenv("TELEMETRY", "false")


@pytest.fixture
def project_files():
    """A small but complete project tree."""
    return {
        "pyproject.toml": MANIFEST,
        "LICENSE": MIT_LICENSE,
        "README.md": "# stellarpy\n\npip install stellarpy\n",
        "src/stellarpy/__init__.py": '"""Stellar spectra."""\n',
        "src/stellarpy/empty.py": "",
    }


@pytest.fixture
def project_fs(project_files):
    return MemoryFileAccess(project_files)

"""Tests for the pyproject.toml manifest format."""

import pytest
from semantic_version import Version

from rsmd._crosswalk.formats.manifest import ManifestFormat, set_manifest_version
from rsmd._crosswalk.record import MetadataRecord, Person
from rsmd.exceptions import ParseError

from .conftest import MANIFEST


@pytest.fixture
def fmt():
    return ManifestFormat()


def _record(**overrides):
    values = dict(
        name="stellarpy",
        version=Version("1.2.0"),
        description="Tools for stellar spectra",
        license_id="MIT",
        authors=[Person(name="Ada Lovelace", email="ada@example.org")],
        keywords=["astronomy"],
        repository_url="https://github.com/example/stellarpy",
    )
    values.update(overrides)
    return MetadataRecord(**values)


class TestManifestExtract:
    def test_missing_file_is_all_absent(self, fmt):
        assert fmt.extract(None).present_fields() == []

    def test_extracts_project_table(self, fmt):
        record = fmt.extract(MANIFEST.encode())

        assert record.name == "stellarpy"
        assert record.version == Version("1.2.0")
        assert record.description == "Tools for stellar spectra"
        assert record.license_id == "MIT"
        assert record.authors == [Person(name="Ada Lovelace", email="ada@example.org")]
        assert record.keywords == ["astronomy"]
        assert record.repository_url == "https://github.com/example/stellarpy"

    def test_dynamic_version_is_absent(self, fmt):
        content = b'[project]\nname = "pkg"\ndynamic = ["version"]\n'
        assert fmt.extract(content).version is None

    def test_license_text_table(self, fmt):
        content = b'[project]\nname = "pkg"\nlicense = { text = "BSD-3-Clause" }\n'
        assert fmt.extract(content).license_id == "BSD-3-Clause"

    def test_license_file_table_is_absent(self, fmt):
        content = b'[project]\nname = "pkg"\nlicense = { file = "LICENSE" }\n'
        assert fmt.extract(content).license_id is None

    def test_source_url_key_is_case_insensitive(self, fmt):
        content = b'[project]\nname = "pkg"\n[project.urls]\n"source code" = "https://gitlab.com/x/pkg"\n'
        assert fmt.extract(content).repository_url == "https://gitlab.com/x/pkg"

    def test_malformed_toml_raises(self, fmt):
        with pytest.raises(ParseError) as exc_info:
            fmt.extract(b"[project\nname = ")
        assert exc_info.value.path == "pyproject.toml"

    def test_invalid_version_raises(self, fmt):
        with pytest.raises(ParseError, match="invalid semantic version"):
            fmt.extract(b'[project]\nversion = "one.two"\n')

    def test_authors_must_be_tables(self, fmt):
        with pytest.raises(ParseError, match="authors"):
            fmt.extract(b'[project]\nauthors = ["Ada"]\n')


class TestManifestWrite:
    def test_unchanged_record_is_byte_identical(self, fmt):
        content = MANIFEST.encode()
        assert fmt.write(content, _record()) == content

    def test_only_version_changes(self, fmt):
        content = MANIFEST.encode()
        rendered = fmt.write(content, _record(version=Version("1.3.0"))).decode()

        assert rendered == MANIFEST.replace('version = "1.2.0"', 'version = "1.3.0"')

    def test_unowned_regions_survive(self, fmt):
        rendered = fmt.write(MANIFEST.encode(), _record(keywords=["astronomy", "spectra"])).decode()

        assert "# Tool settings below are not metadata and must survive rewrites" in rendered
        assert "[tool.ruff]\nline-length = 100" in rendered
        assert 'build-backend = "setuptools.build_meta"' in rendered

    def test_skipped_version_is_kept(self, fmt):
        content = MANIFEST.encode()
        assert fmt.write(content, _record(version=Version("9.9.9")), skip={"version"}) == content

    def test_new_authors_are_appended(self, fmt):
        authors = [Person(name="Ada Lovelace", email="ada@example.org"), Person(name="Grace Hopper")]
        rendered = fmt.write(MANIFEST.encode(), _record(authors=authors))

        assert fmt.extract(rendered).authors == authors

    def test_license_text_table_is_updated_in_place(self, fmt):
        content = b'[project]\nname = "pkg"\nlicense = { text = "MIT" }\n'
        rendered = fmt.write(content, _record(name="pkg", license_id="ISC"))
        assert b'license = { text = "ISC" }' in rendered

    def test_license_file_table_is_left_alone(self, fmt):
        content = b'[project]\nname = "pkg"\nlicense = { file = "LICENSE" }\n'
        rendered = fmt.write(content, _record(name="pkg", license_id="ISC"))
        assert b'license = { file = "LICENSE" }' in rendered

    def test_missing_manifest_is_created(self, fmt):
        rendered = fmt.write(None, _record())

        assert b"[build-system]" in rendered
        record = fmt.extract(rendered)
        assert record.name == "stellarpy"
        assert record.version == Version("1.2.0")
        assert record.repository_url == "https://github.com/example/stellarpy"


class TestSetManifestVersion:
    def test_rewrites_only_the_version(self):
        rendered = set_manifest_version(MANIFEST.encode(), Version("2.0.0")).decode()
        assert rendered == MANIFEST.replace('version = "1.2.0"', 'version = "2.0.0"')

    def test_requires_static_version(self):
        with pytest.raises(ParseError):
            set_manifest_version(b'[project]\nname = "pkg"\n', Version("2.0.0"))

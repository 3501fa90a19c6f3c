"""Tests for the LICENSE file and SPDX source header formats."""

from datetime import date

import pytest

from rsmd._crosswalk.formats.headers import HeadersFormat
from rsmd._crosswalk.formats.license import LicenseFormat, detect_license
from rsmd._crosswalk.fs import MemoryFileAccess
from rsmd._crosswalk.record import MetadataRecord, Person

from .conftest import MIT_LICENSE

APACHE_HEAD = """
                                 Apache License
                           Version 2.0, January 2004
                        http://www.apache.org/licenses/
"""


class TestDetectLicense:
    @pytest.mark.parametrize(
        "text, expected",
        [
            (MIT_LICENSE, "MIT"),
            (APACHE_HEAD, "Apache-2.0"),
            ("SPDX-License-Identifier: GPL-3.0-or-later\n\nGNU GENERAL PUBLIC LICENSE\nVersion 3", "GPL-3.0-or-later"),
            ("All rights reserved by the authors.\n", None),
        ],
    )
    def test_detection(self, text, expected):
        assert detect_license(text) == expected


class TestLicenseFormat:
    def test_paths_prefers_existing_variant(self):
        fs = MemoryFileAccess({"LICENSE.md": "MIT License\n"})
        assert LicenseFormat().paths(fs) == ["LICENSE.md"]

    def test_paths_defaults_to_license(self):
        assert LicenseFormat().paths(MemoryFileAccess()) == ["LICENSE"]

    def test_matching_license_is_untouched(self):
        content = MIT_LICENSE.encode()
        assert LicenseFormat().write(content, MetadataRecord(license_id="MIT")) == content

    def test_unknown_text_gains_identifier_line(self):
        content = b"Custom terms apply.\n"
        rendered = LicenseFormat().write(content, MetadataRecord(license_id="MIT"))
        assert rendered == b"SPDX-License-Identifier: MIT\n\nCustom terms apply.\n"

    def test_existing_identifier_line_is_replaced(self):
        content = b"SPDX-License-Identifier: MIT\n\nCustom terms apply.\n"
        rendered = LicenseFormat().write(content, MetadataRecord(license_id="ISC"))
        assert rendered == b"SPDX-License-Identifier: ISC\n\nCustom terms apply.\n"

    def test_conflicting_license_text_is_not_reworded(self):
        content = MIT_LICENSE.encode()
        assert LicenseFormat().write(content, MetadataRecord(license_id="Apache-2.0")) == content

    def test_missing_file_from_full_text_template(self):
        record = MetadataRecord(license_id="MIT", authors=[Person(name="Ada Lovelace"), Person(name="Grace Hopper")])
        text = LicenseFormat().write(None, record).decode()

        assert text.startswith("MIT License")
        assert f"Copyright (c) {date.today().year} Ada Lovelace, Grace Hopper" in text
        assert detect_license(text) == "MIT"

    def test_missing_file_from_reference_template(self):
        text = LicenseFormat().write(None, MetadataRecord(license_id="EUPL-1.2")).decode()

        assert text.startswith("SPDX-License-Identifier: EUPL-1.2")
        assert "the authors" in text

    def test_no_license_leaves_file_absent(self):
        assert LicenseFormat().write(None, MetadataRecord()) is None


class TestHeadersFormat:
    def setup_method(self):
        self.fmt = HeadersFormat()
        self.record = MetadataRecord(license_id="MIT")

    def test_paths_skip_virtualenvs(self):
        fs = MemoryFileAccess({"pkg/a.py": "", "venv/lib/b.py": "", ".tox/c.py": "", "setup.py": ""})
        assert self.fmt.paths(fs) == ["pkg/a.py", "setup.py"]

    def test_extract_within_first_lines(self):
        content = b"#!/usr/bin/env python\n# SPDX-License-Identifier: BSD-3-Clause\nimport os\n"
        assert self.fmt.extract(content).license_id == "BSD-3-Clause"

    def test_header_beyond_scan_window_is_ignored(self):
        content = ("x = 1\n" * 12 + "# SPDX-License-Identifier: MIT\n").encode()
        assert self.fmt.extract(content).license_id is None

    def test_inserted_at_top(self):
        assert self.fmt.write(b"import os\n", self.record) == b"# SPDX-License-Identifier: MIT\nimport os\n"

    def test_inserted_after_shebang_and_coding(self):
        content = b"#!/usr/bin/env python\n# -*- coding: utf-8 -*-\nimport os\n"
        rendered = self.fmt.write(content, self.record)
        assert rendered == b"#!/usr/bin/env python\n# -*- coding: utf-8 -*-\n# SPDX-License-Identifier: MIT\nimport os\n"

    def test_existing_header_replaced_keeping_line_ending(self):
        content = b"# SPDX-License-Identifier: GPL-3.0-only\r\nimport os\r\n"
        assert self.fmt.write(content, self.record) == b"# SPDX-License-Identifier: MIT\r\nimport os\r\n"

    def test_matching_header_untouched(self):
        content = b"# SPDX-License-Identifier: MIT\nimport os\n"
        assert self.fmt.write(content, self.record) == content

    def test_empty_file_left_alone(self):
        assert self.fmt.write(b"", self.record) == b""

    def test_no_canonical_license_left_alone(self):
        assert self.fmt.write(b"import os\n", MetadataRecord()) == b"import os\n"

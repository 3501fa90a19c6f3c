"""LICENSE file format.

The license file owns the project's SPDX license identifier. It is detected
from an explicit ``SPDX-License-Identifier:`` line or, failing that, from the
heading of well-known license texts.
"""

import re
from datetime import date
from typing import AbstractSet, List, Optional, Tuple

from rsmd.exceptions import ParseError
from rsmd.logging_config import logger

from ..fs import FileAccess
from ..record import MetadataRecord, PartialRecord

LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "LICENCE", "COPYING")

SPDX_LINE = re.compile(r"SPDX-License-Identifier:\s*(?P<id>[^\s*#]+(?:\s+(?:OR|AND|WITH)\s+[^\s*#]+)*)")

# (pattern over the first lines of the file, SPDX identifier); order matters
LICENSE_HEADINGS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"BSD 2-Clause", re.IGNORECASE), "BSD-2-Clause"),
    (re.compile(r"BSD 3-Clause", re.IGNORECASE), "BSD-3-Clause"),
    (re.compile(r"\bMIT License\b", re.IGNORECASE), "MIT"),
    (re.compile(r"\bISC License\b", re.IGNORECASE), "ISC"),
    (re.compile(r"Apache License\s+Version 2\.0", re.IGNORECASE), "Apache-2.0"),
    (re.compile(r"GNU AFFERO GENERAL PUBLIC LICENSE\s+Version 3", re.IGNORECASE), "AGPL-3.0-only"),
    (re.compile(r"GNU LESSER GENERAL PUBLIC LICENSE\s+Version 3", re.IGNORECASE), "LGPL-3.0-only"),
    (re.compile(r"GNU GENERAL PUBLIC LICENSE\s+Version 3", re.IGNORECASE), "GPL-3.0-only"),
    (re.compile(r"GNU GENERAL PUBLIC LICENSE\s+Version 2", re.IGNORECASE), "GPL-2.0-only"),
    (re.compile(r"Mozilla Public License,?\s+(?:Version|v\.)\s*2\.0", re.IGNORECASE), "MPL-2.0"),
    (re.compile(r"This is free and unencumbered software released into the public domain", re.IGNORECASE), "Unlicense"),
]

MIT_TEMPLATE = """MIT License

Copyright (c) {year} {holders}

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

_BSD_CONDITIONS = """Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice, this
   list of conditions and the following disclaimer.

2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer in the documentation
   and/or other materials provided with the distribution.
"""

_BSD_THIRD_CONDITION = """
3. Neither the name of the copyright holder nor the names of its
   contributors may be used to endorse or promote products derived from
   this software without specific prior written permission.
"""

_BSD_DISCLAIMER = """
THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""

BSD_2_TEMPLATE = "BSD 2-Clause License\n\nCopyright (c) {year}, {holders}\n\n" + _BSD_CONDITIONS + _BSD_DISCLAIMER

BSD_3_TEMPLATE = (
    "BSD 3-Clause License\n\nCopyright (c) {year}, {holders}\n\n" + _BSD_CONDITIONS + _BSD_THIRD_CONDITION + _BSD_DISCLAIMER
)

ISC_TEMPLATE = """ISC License

Copyright (c) {year} {holders}

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN
ACTION OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF
OR IN CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.
"""

REFERENCE_TEMPLATE = """SPDX-License-Identifier: {license_id}

Copyright (c) {year} {holders}

This software is distributed under the terms of the {license_id} license.
The full text is available at https://spdx.org/licenses/{license_id}.html
"""

LICENSE_TEMPLATES = {
    "MIT": MIT_TEMPLATE,
    "BSD-2-Clause": BSD_2_TEMPLATE,
    "BSD-3-Clause": BSD_3_TEMPLATE,
    "ISC": ISC_TEMPLATE,
}


def detect_license(text: str) -> Optional[str]:
    """Identify the SPDX license of a license text, or None if unknown."""
    match = SPDX_LINE.search(text)
    if match:
        return match.group("id").strip()

    # Headings live at the top; avoid matching references deep in the body
    head = "\n".join(text.splitlines()[:15])
    for pattern, license_id in LICENSE_HEADINGS:
        if pattern.search(head):
            return license_id
    return None


class LicenseFormat:
    """
    Format handler for the LICENSE file.

    Only the license identifier is read. Existing license texts are never
    reworded; an undetectable text gains an SPDX identifier line at the top.
    """

    name = "license"

    def paths(self, fs: FileAccess) -> List[str]:
        for candidate in LICENSE_FILES:
            if fs.read_bytes(candidate) is not None:
                return [candidate]
        return [LICENSE_FILES[0]]

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        if content is None:
            return PartialRecord()
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("LICENSE", str(e)) from e

        license_id = detect_license(text)
        if license_id is None:
            logger.debug("Could not identify the license in the LICENSE file")
        return PartialRecord(license_id=license_id)

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        if not record.license_id or "license_id" in skip:
            return content

        if content is None:
            holders = ", ".join(p.name for p in record.authors if p.name) or "the authors"
            template = LICENSE_TEMPLATES.get(record.license_id, REFERENCE_TEMPLATE)
            text = template.format(year=date.today().year, holders=holders, license_id=record.license_id)
            return text.encode("utf-8")

        text = content.decode("utf-8")
        detected = detect_license(text)
        if detected == record.license_id:
            return content

        match = SPDX_LINE.search(text)
        if match:
            start, end = match.span("id")
            return (text[:start] + record.license_id + text[end:]).encode("utf-8")
        if detected is None:
            return (f"SPDX-License-Identifier: {record.license_id}\n\n" + text).encode("utf-8")

        # A recognised license text that disagrees with the canonical identifier
        # is left for a human to resolve.
        logger.warning(f"LICENSE text is {detected} but the canonical license is {record.license_id}; not rewriting")
        return content

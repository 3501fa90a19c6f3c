"""Metadata file format implementations."""

from .codemeta import CodeMetaFormat
from .headers import HeadersFormat
from .license import LicenseFormat
from .manifest import ManifestFormat
from .zenodo import ZenodoFormat

__all__ = [
    "CodeMetaFormat",
    "HeadersFormat",
    "LicenseFormat",
    "ManifestFormat",
    "ZenodoFormat",
]

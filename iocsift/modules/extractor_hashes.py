#!/usr/bin/env python3

"""
Hash matchers for IOC extraction.
"""

from __future__ import annotations

from typing import ClassVar

from iocsift.modules.extractor_base import CategoryMatcher
from iocsift.modules.indicators import IndicatorCategory


class HashMatcher(CategoryMatcher):
    """Fixed-length hexadecimal digests, reported lower-cased."""

    def normalize(self, value: str) -> str | None:
        return value.lower()


class Md5Matcher(HashMatcher):
    """Match MD5 hashes (32 hex characters)."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.MD5


class Sha1Matcher(HashMatcher):
    """Match SHA1 hashes (40 hex characters)."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.SHA1


class Sha256Matcher(HashMatcher):
    """Match SHA256 hashes (64 hex characters)."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.SHA256


class Sha512Matcher(HashMatcher):
    """Match SHA512 hashes (128 hex characters)."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.SHA512

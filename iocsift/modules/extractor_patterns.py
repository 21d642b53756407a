#!/usr/bin/env python3

"""
Regex patterns for IOC extraction.

Patterns are compiled with the ``regex`` package so that every scan can be
bounded by a timeout. Two pattern sets exist: one for well-formed indicators
and one that also accepts common defanged notations (``hxxp``, ``[.]``,
``[@]``...). Both are compiled once and shared.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType

import regex

from iocsift.modules.indicators import IndicatorCategory

HEX = r"[0-9a-fA-F]"
HEX_GROUP = HEX + r"{1,4}"

OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
LABEL = r"[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
TLD = r"[a-zA-Z]{2,63}"

PLAIN_DOT = r"\."
DEFANGED_DOT = r"(?:\.|\[\.\]|\(\.\)|\{\.\}|\[dot\])"

PLAIN_AT = r"@"
DEFANGED_AT = r"(?:@|\[@\]|\(@\)|\[at\])"

PLAIN_SCHEME = r"(?i:https?|ftp)://"
DEFANGED_SCHEME = r"(?i:h[tx]{2}ps?|f[tx]p)(?:://|\[:\]//|\[://\])"

HASH_LENGTHS: Mapping[IndicatorCategory, int] = MappingProxyType(
    {
        IndicatorCategory.MD5: 32,
        IndicatorCategory.SHA1: 40,
        IndicatorCategory.SHA256: 64,
        IndicatorCategory.SHA512: 128,
    }
)

# IPv4-embedded forms come first: alternation takes the first branch that
# satisfies the trailing boundary, not the longest one.
IPV6_BODY = (
    r"(?:"
    rf"(?:{HEX_GROUP}:){{6}}{OCTET}(?:\.{OCTET}){{3}}|"
    rf"::(?:[fF]{{4}}(?::0{{1,4}})?:){OCTET}(?:\.{OCTET}){{3}}|"
    rf"(?:{HEX_GROUP}:){{1,5}}:(?:{HEX_GROUP}:){{0,4}}{OCTET}(?:\.{OCTET}){{3}}|"
    rf"(?:{HEX_GROUP}:){{7}}{HEX_GROUP}|"
    rf"(?:{HEX_GROUP}:){{1,7}}:|"
    rf"(?:{HEX_GROUP}:){{1,6}}:{HEX_GROUP}|"
    rf"(?:{HEX_GROUP}:){{1,5}}(?::{HEX_GROUP}){{1,2}}|"
    rf"(?:{HEX_GROUP}:){{1,4}}(?::{HEX_GROUP}){{1,3}}|"
    rf"(?:{HEX_GROUP}:){{1,3}}(?::{HEX_GROUP}){{1,4}}|"
    rf"(?:{HEX_GROUP}:){{1,2}}(?::{HEX_GROUP}){{1,5}}|"
    rf"{HEX_GROUP}:(?::{HEX_GROUP}){{1,6}}|"
    rf":(?::{HEX_GROUP}){{1,7}}"
    r")"
    r"(?:%[0-9a-zA-Z]+)?"
)


def _hostname(dot: str) -> str:
    # The label chain is atomic so a dotted run is walked once; the last label
    # must then be alphabetic.
    return rf"(?>{LABEL}(?:{dot}{LABEL})+)(?<={dot}{TLD})"


def _ipv4(dot: str) -> str:
    return rf"{OCTET}(?:{dot}{OCTET}){{3}}"


def _url(dot: str, scheme: str, at: str) -> str:
    host = rf"(?:{_hostname(dot)}|{_ipv4(dot)}|\[[0-9a-fA-F:.]+\]|{LABEL})"
    return (
        rf"(?<![\w]){scheme}"
        rf"(?:[^\s/?#@<>\"'\[\]]+{at})?"
        rf"{host}"
        r"(?::[0-9]{1,5})?"
        r"(?:[/?#][^\s<>\"'`]*)?"
    )


def _email(dot: str, at: str) -> str:
    return (
        r"(?<![\w.+\-])"
        r"[a-zA-Z0-9_+\-][a-zA-Z0-9._+\-]{0,63}"
        rf"{at}"
        rf"{_hostname(dot)}"
        r"(?![\w\-])"
    )


def _build(defanged: bool) -> dict[IndicatorCategory, regex.Pattern[str]]:
    dot = DEFANGED_DOT if defanged else PLAIN_DOT
    at = DEFANGED_AT if defanged else PLAIN_AT
    scheme = DEFANGED_SCHEME if defanged else PLAIN_SCHEME

    sources: dict[IndicatorCategory, str] = {
        IndicatorCategory.URL: _url(dot, scheme, at),
        IndicatorCategory.IPV4: (
            rf"(?<![\w.]){_ipv4(dot)}(?!(?:{dot})?[\w])"
        ),
        IndicatorCategory.IPV6: rf"(?<![\w:]){IPV6_BODY}(?!\w|:[0-9a-fA-F:]|\.[0-9])",
        IndicatorCategory.DOMAIN: rf"(?<![\w.\-]){_hostname(dot)}(?![\w\-])",
        IndicatorCategory.EMAIL: _email(dot, at),
        IndicatorCategory.MAC_ADDRESS: (
            rf"(?<![\w:\-]){HEX}{{2}}(?P<sep>[:\-]){HEX}{{2}}"
            rf"(?:(?P=sep){HEX}{{2}}){{4}}(?![\w:\-])"
        ),
    }
    for category, length in HASH_LENGTHS.items():
        sources[category] = rf"(?<!\w){HEX}{{{length}}}(?!\w)"

    return {category: regex.compile(source) for category, source in sources.items()}


@lru_cache(maxsize=2)
def get_patterns(defanged: bool = False) -> Mapping[IndicatorCategory, regex.Pattern[str]]:
    """
    Return the compiled pattern set.

    Args:
        defanged: If True, patterns also accept defanged notation

    Returns:
        Read-only mapping of category to compiled pattern
    """
    return MappingProxyType(_build(defanged))


PATTERNS = get_patterns(False)
DEFANGED_PATTERNS = get_patterns(True)

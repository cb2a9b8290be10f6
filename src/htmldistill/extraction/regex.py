"""Schema-less entity scraping with a table of named regular expressions."""

import re
from collections.abc import Mapping
from enum import IntFlag
from typing import Any

from htmldistill.logger import logger


class PatternFamily(IntFlag):
    """Built-in pattern families; combine with ``|``."""

    EMAIL = 1 << 0
    URL = 1 << 1
    IPV4 = 1 << 2
    IPV6 = 1 << 3
    UUID = 1 << 4
    CURRENCY = 1 << 5
    PERCENTAGE = 1 << 6
    NUMBER = 1 << 7
    DATE_ISO = 1 << 8
    DATE_US = 1 << 9
    TIME_24H = 1 << 10
    PHONE_INTL = 1 << 11
    PHONE_US = 1 << 12

    ALL = (
        EMAIL | URL | IPV4 | IPV6 | UUID | CURRENCY | PERCENTAGE | NUMBER
        | DATE_ISO | DATE_US | TIME_24H | PHONE_INTL | PHONE_US
    )


# Families are independent: one span may match several of them.
BUILTIN_PATTERNS: dict[PatternFamily, tuple[str, str, re.RegexFlag]] = {
    PatternFamily.EMAIL: ("email", r"[\w.+-]+@[\w-]+\.[\w.-]*[\w-]", re.NOFLAG),
    PatternFamily.URL: ("url", r"https?://[^\s\"'<>]+", re.NOFLAG),
    PatternFamily.IPV4: (
        "ipv4",
        r"\b(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|1?\d?\d)\b",
        re.NOFLAG,
    ),
    PatternFamily.IPV6: ("ipv6", r"\b(?:[0-9a-f]{1,4}:){7}[0-9a-f]{1,4}\b", re.IGNORECASE),
    PatternFamily.UUID: (
        "uuid",
        r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b",
        re.IGNORECASE,
    ),
    PatternFamily.CURRENCY: (
        "currency",
        r"(?:USD|EUR|GBP|JPY|[$€£¥])\s?\d{1,3}(?:[,\s]?\d{3})*(?:\.\d+)?",
        re.NOFLAG,
    ),
    PatternFamily.PERCENTAGE: ("percentage", r"-?\d+(?:[.,]\d+)?\s?%", re.NOFLAG),
    PatternFamily.NUMBER: ("number", r"\b-?\d{1,3}(?:,\d{3})*(?:\.\d+)?\b", re.NOFLAG),
    PatternFamily.DATE_ISO: (
        "date_iso",
        r"\b\d{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12]\d|3[01])\b",
        re.NOFLAG,
    ),
    PatternFamily.DATE_US: (
        "date_us",
        r"\b(?:0?[1-9]|1[0-2])/(?:0?[1-9]|[12]\d|3[01])/\d{2,4}\b",
        re.NOFLAG,
    ),
    PatternFamily.TIME_24H: ("time_24h", r"\b(?:[01]?\d|2[0-3]):[0-5]\d(?::[0-5]\d)?\b", re.NOFLAG),
    PatternFamily.PHONE_INTL: ("phone_intl", r"\+\d{1,3}[\s.-]?\d{1,4}(?:[\s.-]?\d{2,4}){2,3}", re.NOFLAG),
    PatternFamily.PHONE_US: (
        "phone_us",
        r"(?<!\d)(?:\(\d{3}\)\s?|\d{3}[\s.-])\d{3}[\s.-]\d{4}\b",
        re.NOFLAG,
    ),
}


class RegexExtractionStrategy:
    """Scans text with named patterns and reports every match.

    Matches are listed pattern by pattern, each pattern's matches in text
    order. Overlapping matches from different patterns are all kept.
    """

    def __init__(
        self,
        patterns: PatternFamily = PatternFamily.ALL,
        custom: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the regex extractor.

        Args:
            patterns: Built-in families to run.
            custom: Label to regex mapping; replaces the built-in families
                when given. Patterns that do not compile are skipped.

        """
        self._patterns: list[tuple[str, re.Pattern[str]]] = []
        if custom:
            for label, pattern in custom.items():
                try:
                    self._patterns.append((label, re.compile(pattern)))
                except re.error as e:
                    logger.warning("Skipping custom pattern %r: %s", label, e)
        else:
            for family, (label, pattern, flags) in BUILTIN_PATTERNS.items():
                if family in patterns:
                    self._patterns.append((label, re.compile(pattern, flags)))

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self._patterns]

    def extract(self, content: str, url: str = "") -> list[dict[str, Any]]:
        """Return ``{url, label, value, span}`` for every match in ``content``."""
        return [
            {"url": url, "label": label, "value": match.group(0), "span": [match.start(), match.end()]}
            for label, pattern in self._patterns
            for match in pattern.finditer(content)
        ]

"""
Date tag normalization.

Date tags come in whatever shape the tagger wrote. A DateNormalizer tries an
ordered list of templates and produces "YYYY", "YYYY-MM" or "YYYY-MM-DD".
"""

import re
from typing import Iterable, List, Optional, Pattern

from loguru import logger

DEFAULT_DATE_FORMATS = ["YYYY-MM-DD", "YYYY-MM", "YYYY"]

_TOKENS = {
    "YYYY": r"(?P<year>[0-9]{4})",
    "MM": r"(?P<month>[0-9]{2})",
    "DD": r"(?P<day>[0-9]{2})",
}
_TOKEN_SPLIT = re.compile(r"(YYYY|MM|DD)")


class DateTemplate:
    """One date layout such as "YYYY-MM-DD" or "DD.MM.YYYY".

    YYYY, MM and DD are placeholders; every other character must match
    literally. The template only has to match the start of the value, so
    "2001-05-06T00:00Z" parses with "YYYY-MM-DD".
    """

    def __init__(self, template: str):
        self.template = template
        self.pattern = self._compile(template)

    @staticmethod
    def _compile(template: str) -> Pattern[str]:
        parts = _TOKEN_SPLIT.split(template)
        if "YYYY" not in parts:
            raise ValueError(f"Date template {template!r} has no YYYY field")
        if "DD" in parts and "MM" not in parts:
            raise ValueError(f"Date template {template!r} has a day but no month")
        for token in _TOKENS:
            if parts.count(token) > 1:
                raise ValueError(f"Date template {template!r} repeats {token}")
        return re.compile("".join(_TOKENS.get(part, re.escape(part)) for part in parts))

    def try_parse(self, value: str) -> Optional[str]:
        match = self.pattern.match(value.strip())
        if match is None:
            return None

        fields = match.groupdict()
        result = fields["year"]
        month = fields.get("month")
        if month is not None:
            if not 1 <= int(month) <= 12:
                return None
            result += f"-{month}"
            day = fields.get("day")
            if day is not None:
                if not 1 <= int(day) <= 31:
                    return None
                result += f"-{day}"
        return result


class DateNormalizer:
    """Normalizes date tags by trying templates in order."""

    def __init__(self, formats: Iterable[str] = DEFAULT_DATE_FORMATS):
        self.templates: List[DateTemplate] = []
        for fmt in formats:
            try:
                self.templates.append(DateTemplate(fmt))
            except ValueError as e:
                logger.warning(f"Ignoring date format: {e}")

    def normalize(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        for template in self.templates:
            result = template.try_parse(value)
            if result is not None:
                return result
        return None

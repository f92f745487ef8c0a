"""
Filename and type filters deciding which files a snapshot tracks.
"""

import logging
import re

from file_drone.models import FileRecord
from file_drone.models.exceptions import FilterConfigurationError

logger = logging.getLogger(__name__)

PatternLike = str | re.Pattern | None


def _compile(filter_name: str, pattern: PatternLike) -> re.Pattern | None:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as e:
        logger.error("Rejected %s %r: %s", filter_name, pattern, e)
        raise FilterConfigurationError(
            f"Invalid {filter_name}: {e}", filter_name=filter_name, pattern=str(pattern), underlying_error=e
        ) from e


class FilterChain:
    """
    Decides whether a file qualifies for tracking.

    A record passes when every configured pattern is found in its target:
    ``file_name_pattern`` in the file's base name and ``type_pattern`` in its
    type tag. Unset patterns impose no constraint. Patterns are compiled on
    assignment, so an invalid one raises FilterConfigurationError right away
    and the previous pattern stays active.
    """

    def __init__(self, file_name_pattern: PatternLike = None, type_pattern: PatternLike = None):
        self._file_name_regex = _compile("file_name_pattern", file_name_pattern)
        self._type_regex = _compile("type_pattern", type_pattern)

    @property
    def file_name_pattern(self) -> re.Pattern | None:
        return self._file_name_regex

    @file_name_pattern.setter
    def file_name_pattern(self, pattern: PatternLike) -> None:
        self._file_name_regex = _compile("file_name_pattern", pattern)

    @property
    def type_pattern(self) -> re.Pattern | None:
        return self._type_regex

    @type_pattern.setter
    def type_pattern(self, pattern: PatternLike) -> None:
        self._type_regex = _compile("type_pattern", pattern)

    @property
    def is_empty(self) -> bool:
        """True when no pattern is configured and every file passes."""
        return self._file_name_regex is None and self._type_regex is None

    def copy(self) -> "FilterChain":
        """Independent chain with the same patterns, unaffected by later assignments."""
        return FilterChain(self._file_name_regex, self._type_regex)

    def matches(self, record: FileRecord) -> bool:
        """
        Check whether a record passes every configured pattern.

        Args:
            record: File record to check

        Returns:
            True if the file should be tracked
        """
        if self._file_name_regex is not None and not self._file_name_regex.search(record.name):
            return False
        if self._type_regex is not None and not self._type_regex.search(record.type_tag):
            return False
        return True

    def __repr__(self) -> str:
        name = self._file_name_regex.pattern if self._file_name_regex else None
        type_ = self._type_regex.pattern if self._type_regex else None
        return f"FilterChain(file_name_pattern={name!r}, type_pattern={type_!r})"

"""
Extraction data models: pattern chains, platform profiles and results.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field, fields
from types import MappingProxyType
from typing import Any

Coercer = Callable[[str], Any]


def as_text(raw: str) -> str | None:
    """
    Collapse internal whitespace; empty text becomes None.
    """

    collapsed = " ".join(raw.split())
    return collapsed or None


def as_int(raw: str) -> int | None:
    """
    Parse an integer capture, tolerating thousands separators.
    """

    try:
        return int(raw.strip().replace(",", ""))
    except ValueError:
        return None


@dataclass(frozen=True)
class ExtractionResult:
    """
    Normalized participant result for one page. Every field is nullable.
    """

    race_name: str | None = None
    name: str | None = None
    category: str | None = None
    finish_time: str | None = None
    bib_number: str | None = None
    rank_overall: int | None = None
    rank_category: int | None = None
    pace: str | None = None
    platform: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


RESULT_FIELDS: tuple[str, ...] = tuple(
    item.name for item in fields(ExtractionResult) if item.name != "platform"
)


@dataclass(frozen=True)
class FieldPattern:
    """
    One entry in a pattern chain: a regex, the capture group to read and a coercion.
    """

    regex: re.Pattern[str]
    group: int | str = 1
    coerce: Coercer = as_text

    def apply(self, text: str) -> tuple[bool, Any]:
        """
        Return (matched, value).

        `matched` is True when the regex matches and the designated group is
        non-empty; `value` is the coerced capture, which may still be None
        when coercion rejects it.
        """

        match = self.regex.search(text)
        if match is None:
            return False, None
        try:
            captured = match.group(self.group)
        except IndexError:
            return False, None
        if captured is None or not captured.strip():
            return False, None
        try:
            return True, self.coerce(captured)
        except (TypeError, ValueError):
            return True, None


def pattern(
    regex: str,
    *,
    group: int | str = 1,
    coerce: Coercer = as_text,
    flags: int = re.IGNORECASE,
) -> FieldPattern:
    """
    Compile a FieldPattern; patterns are case-insensitive unless flags say otherwise.
    """

    return FieldPattern(regex=re.compile(regex, flags), group=group, coerce=coerce)


@dataclass(frozen=True)
class FieldExtractor:
    """
    Ordered fallback chain for one field. Earlier patterns win.
    """

    field_name: str
    patterns: tuple[FieldPattern, ...]

    def extract(self, text: str) -> Any:
        for candidate in self.patterns:
            matched, value = candidate.apply(text)
            if matched:
                return value
        return None


@dataclass(frozen=True)
class PlatformProfile:
    """
    One timing vendor: a host predicate plus per-field pattern chains.
    """

    name: str
    host_pattern: re.Pattern[str]
    fields: Mapping[str, FieldExtractor] = field(default_factory=dict)
    settle_seconds: float | None = None
    notes: str = ""

    def __post_init__(self) -> None:
        unknown = sorted(set(self.fields) - set(RESULT_FIELDS))
        if unknown:
            raise ValueError(f"Unknown result fields for platform '{self.name}': {unknown}")
        mismatched = [key for key, extractor in self.fields.items() if extractor.field_name != key]
        if mismatched:
            raise ValueError(f"Field extractor names do not match keys: {mismatched}")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def matches_host(self, host: str) -> bool:
        return self.host_pattern.search(host.lower()) is not None


def build_profile(
    *,
    name: str,
    host_regex: str,
    chains: Mapping[str, list[FieldPattern]],
    settle_seconds: float | None = None,
    notes: str = "",
) -> PlatformProfile:
    """
    Assemble a PlatformProfile from plain lists of patterns per field.
    """

    return PlatformProfile(
        name=name,
        host_pattern=re.compile(host_regex, re.IGNORECASE),
        fields={
            field_name: FieldExtractor(field_name=field_name, patterns=tuple(chain))
            for field_name, chain in chains.items()
        },
        settle_seconds=settle_seconds,
        notes=notes,
    )

"""
Built-in timing vendor profiles.

Each chain is vendor configuration data tuned against sample pages; append
new patterns to the end of a chain to support a layout variant without
disturbing the existing ones.

Registration order is the tie-break when more than one profile could match a
host. The host patterns below are anchored to each vendor's registrable
domain, so none of them currently overlap.
"""

from __future__ import annotations

import re

from app.extraction.types import FieldPattern, PlatformProfile, as_int, build_profile, pattern

CLOCK_TIME = r"(\d{1,2}:\d{2}:\d{2})"
PACE_TIME = r"(\d{1,2}:\d{2}(?::\d{2})?)"
RANK_NUMBER = r"(\d[\d,]*)"
LABEL_SEPARATOR = r"\s*[:\-]?\s*"

RACE_TITLE = pattern(
    r"^[ \t]*([^\n]*?\b(?:Marathon|Half\s+Marathon|Ultra|Trail|Triathlon|Run|Race|\d+\s?K)\b[^\n]*?)[ \t]*$",
    flags=re.IGNORECASE | re.MULTILINE,
)


def _timed(label: str) -> FieldPattern:
    return pattern(rf"{label}{LABEL_SEPARATOR}{CLOCK_TIME}")


def _ranked(label: str) -> FieldPattern:
    return pattern(rf"{label}{LABEL_SEPARATOR}{RANK_NUMBER}", coerce=as_int)


def _labelled_line(label: str) -> FieldPattern:
    return pattern(rf"{label}\s*[:\-]\s*([^\n]+)")


SPORTS_TIMING_SOLUTIONS = build_profile(
    name="Sports Timing Solutions",
    host_regex=r"(?:^|\.)sportstimingsolutions\.in$",
    settle_seconds=3.0,
    notes="Registered first; only matches sportstimingsolutions.in and its subdomains.",
    chains={
        "race_name": [RACE_TITLE],
        "name": [
            # Participant name sits between the "Share" button and "BIB No".
            pattern(r"Share[\s\n]+(?:RS[\s\n]+)?([A-Z][a-z]+(?:\s+[A-Z](?:[a-z]+)?)*)\s+BIB\s+No"),
            _labelled_line(r"(?:Participant\s+)?Name"),
        ],
        "bib_number": [
            pattern(r"BIB\s+No[:\s]+(\d+)"),
            pattern(r"Bib(?:\s+Number)?\s*[:\-#]\s*([A-Z0-9][A-Z0-9\-]*)"),
        ],
        "finish_time": [
            pattern(rf"Finish\s+Time[:\s]+{CLOCK_TIME}"),
            _timed(r"Chip\s+Time"),
            _timed(r"Net\s+Time"),
            _timed(r"Gun\s+Time"),
        ],
        "category": [
            # Age group line inside the Rank section, not the category dropdown.
            pattern(
                r"Rank[\s\S]{0,300}\n(\d{1,2}\s+yrs\s+&\s+Above\s+(?:Male|Female))",
                flags=0,
            ),
            pattern(r"\n(\d{1,2}\s*-\s*\d{1,2}\s+yrs\s+(?:Male|Female))\s*\n"),
            _labelled_line(r"Category"),
        ],
        "rank_overall": [
            pattern(rf"Overall[:\s]+{RANK_NUMBER}[\s]+OF", coerce=as_int),
            _ranked(r"Overall\s+Rank"),
        ],
        "rank_category": [
            pattern(
                r"\d+\s+yrs\s+&\s+Above\s+(?:Male|Female)[\s\n]+(\d+)[\s]+OF\s+(\d+)",
                coerce=as_int,
            ),
            pattern(
                r"\d{1,2}\s*-\s*\d{1,2}\s+yrs\s+(?:Male|Female)[\s\n]+(\d+)[\s]+OF\s+(\d+)",
                coerce=as_int,
            ),
            _ranked(r"Category\s+Rank"),
        ],
        "pace": [
            pattern(rf"Chip\s+Pace\s*\(min/km\)[:\s]+{CLOCK_TIME}"),
            pattern(rf"Gun\s+Pace\s*\(min/km\)[:\s]+{CLOCK_TIME}"),
            pattern(rf"Pace{LABEL_SEPARATOR}{PACE_TIME}"),
        ],
    },
)

MYSAMAY = build_profile(
    name="MySamay",
    host_regex=r"(?:^|\.)mysamay\.in$",
    notes="Registered second; only matches mysamay.in and its subdomains.",
    chains={
        "race_name": [
            _labelled_line(r"(?:Event|Race)\s+Name"),
            RACE_TITLE,
        ],
        "name": [
            _labelled_line(r"(?:Participant|Runner)\s+Name"),
            _labelled_line(r"Name"),
        ],
        "bib_number": [
            pattern(r"Bib(?:\s*(?:No\.?|Number))?\s*[:\-#]\s*([A-Z0-9][A-Z0-9\-]*)"),
        ],
        "category": [
            _labelled_line(r"Category"),
            _labelled_line(r"Age\s+Group"),
        ],
        "finish_time": [
            _timed(r"Chip\s+Time"),
            _timed(r"Net\s+Time"),
            _timed(r"Finish\s+Time"),
            _timed(r"Gun\s+Time"),
        ],
        "rank_overall": [
            _ranked(r"Overall\s+(?:Rank|Position)"),
            pattern(rf"Overall{LABEL_SEPARATOR}{RANK_NUMBER}\s*(?:/|of)", coerce=as_int),
        ],
        "rank_category": [
            _ranked(r"(?:Category|Age\s+Group)\s+(?:Rank|Position)"),
        ],
        "pace": [
            pattern(rf"(?:Avg\.?\s+)?Pace\s*(?:\(min/km\))?{LABEL_SEPARATOR}{PACE_TIME}"),
        ],
    },
)

IFINISH = build_profile(
    name="iFinish",
    host_regex=r"(?:^|\.)ifinish\.in$",
    notes="Registered third; only matches ifinish.in and its subdomains.",
    chains={
        "race_name": [
            _labelled_line(r"Event"),
            RACE_TITLE,
        ],
        "name": [
            _labelled_line(r"Runner"),
            _labelled_line(r"Name"),
        ],
        "bib_number": [
            pattern(r"BIB\s*(?:No\.?)?\s*[:\-#]\s*([A-Z0-9][A-Z0-9\-]*)"),
        ],
        "category": [
            _labelled_line(r"Race\s+Category"),
            _labelled_line(r"Category"),
        ],
        "finish_time": [
            _timed(r"Net\s+Time"),
            _timed(r"Chip\s+Time"),
            _timed(r"Gun\s+Time"),
        ],
        "rank_overall": [
            _ranked(r"Overall\s+Position"),
            _ranked(r"Overall\s+Rank"),
        ],
        "rank_category": [
            _ranked(r"(?:AG|Age\s+Group)\s+Position"),
            _ranked(r"Category\s+(?:Rank|Position)"),
        ],
        "pace": [
            pattern(rf"Pace\s*(?:\(min/km\))?{LABEL_SEPARATOR}{PACE_TIME}"),
        ],
    },
)

BUILTIN_PROFILES: tuple[PlatformProfile, ...] = (
    SPORTS_TIMING_SOLUTIONS,
    MYSAMAY,
    IFINISH,
)

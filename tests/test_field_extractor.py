"""
tests/test_field_extractor.py

Pattern chains of the built-in vendor profiles applied to recorded page text.

Coverage
--------
- Full extraction for each built-in vendor
- Pattern precedence within a chain
- Graceful degradation when fields are absent
- Integer coercion of rank captures
"""

from __future__ import annotations

import pytest

from app.extraction.extractor import extract_fields
from app.extraction.platforms import IFINISH, MYSAMAY, SPORTS_TIMING_SOLUTIONS
from app.extraction.types import (
    ExtractionResult,
    FieldExtractor,
    as_int,
    as_text,
    build_profile,
    pattern,
)
from tests.conftest import IFINISH_PAGE_TEXT, MYSAMAY_PAGE_TEXT, STS_PAGE_TEXT


# ---------------------------------------------------------------------------
# Vendor profiles
# ---------------------------------------------------------------------------


class TestSportsTimingSolutions:
    def test_extracts_every_field_from_result_page(self) -> None:
        result = extract_fields(STS_PAGE_TEXT, SPORTS_TIMING_SOLUTIONS)

        assert result == ExtractionResult(
            race_name="Tata Mumbai Marathon 2026",
            name="Rahul Sharma",
            category="40 yrs & Above Male",
            finish_time="03:45:12",
            bib_number="40213",
            rank_overall=512,
            rank_category=37,
            pace="00:05:20",
            platform="Sports Timing Solutions",
        )

    def test_category_comes_from_rank_section_not_dropdown(self) -> None:
        text = "Category\n21 KM\n" + STS_PAGE_TEXT
        result = extract_fields(text, SPORTS_TIMING_SOLUTIONS)
        assert result.category == "40 yrs & Above Male"

    def test_falls_back_to_chip_time_when_finish_time_label_missing(self) -> None:
        text = STS_PAGE_TEXT.replace("Finish Time: 03:45:12", "Chip Time: 03:44:59")
        result = extract_fields(text, SPORTS_TIMING_SOLUTIONS)
        assert result.finish_time == "03:44:59"


class TestMySamay:
    def test_extracts_labelled_fields(self) -> None:
        result = extract_fields(MYSAMAY_PAGE_TEXT, MYSAMAY)

        assert result.race_name == "Pune Half Marathon 2026"
        assert result.name == "Ananya Iyer"
        assert result.bib_number == "H-2231"
        assert result.category == "Half Marathon Female 30-39"
        assert result.rank_overall == 1204
        assert result.rank_category == 87
        assert result.pace == "05:20"
        assert result.platform == "MySamay"

    def test_chip_time_wins_over_gun_time(self) -> None:
        result = extract_fields(MYSAMAY_PAGE_TEXT, MYSAMAY)
        assert result.finish_time == "01:52:40"

    def test_gun_time_used_when_no_earlier_pattern_matches(self) -> None:
        text = MYSAMAY_PAGE_TEXT.replace("Chip Time: 01:52:40\n", "")
        result = extract_fields(text, MYSAMAY)
        assert result.finish_time == "01:54:05"


class TestIFinish:
    def test_extracts_labelled_fields(self) -> None:
        result = extract_fields(IFINISH_PAGE_TEXT, IFINISH)

        assert result == ExtractionResult(
            race_name="Bengaluru 10K Challenge",
            name="Vikram Rao",
            category="10K Open Male",
            finish_time="00:48:31",
            bib_number="10K-5521",
            rank_overall=342,
            rank_category=41,
            pace="04:51",
            platform="iFinish",
        )


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------


class TestGracefulDegradation:
    def test_missing_fields_are_none(self) -> None:
        result = extract_fields("Participant Name: Solo Runner\n", MYSAMAY)

        assert result.name == "Solo Runner"
        assert result.finish_time is None
        assert result.bib_number is None
        assert result.rank_overall is None
        assert result.platform == "MySamay"

    def test_empty_text_yields_all_none_fields(self) -> None:
        result = extract_fields("", IFINISH)
        values = result.as_dict()
        values.pop("platform")
        assert set(values.values()) == {None}

    def test_unconfigured_field_is_none(self) -> None:
        profile = build_profile(
            name="Names Only",
            host_regex=r"names\.example$",
            chains={"name": [pattern(r"Name:\s*([^\n]+)")]},
        )
        result = extract_fields("Name: Kim\nFinish Time: 01:00:00", profile)
        assert result.name == "Kim"
        assert result.finish_time is None


# ---------------------------------------------------------------------------
# Chain mechanics
# ---------------------------------------------------------------------------


class TestFieldExtractorChain:
    def test_first_matching_pattern_wins(self) -> None:
        extractor = FieldExtractor(
            field_name="finish_time",
            patterns=(
                pattern(r"Net Time:\s*(\S+)"),
                pattern(r"Gun Time:\s*(\S+)"),
            ),
        )
        assert extractor.extract("Gun Time: 2\nNet Time: 1") == "1"

    def test_empty_capture_moves_to_next_pattern(self) -> None:
        extractor = FieldExtractor(
            field_name="name",
            patterns=(
                pattern(r"Name:([ \t]*)\n"),
                pattern(r"Runner:\s*([^\n]+)"),
            ),
        )
        assert extractor.extract("Name:   \nRunner: Asha") == "Asha"

    def test_missing_group_is_treated_as_no_match(self) -> None:
        extractor = FieldExtractor(
            field_name="name",
            patterns=(
                pattern(r"Name: \w+", group=2),
                pattern(r"Name: (\w+)"),
            ),
        )
        assert extractor.extract("Name: Asha") == "Asha"

    def test_matched_pattern_decides_even_when_coercion_rejects(self) -> None:
        extractor = FieldExtractor(
            field_name="rank_overall",
            patterns=(
                pattern(r"Rank:\s*(\w+)", coerce=as_int),
                pattern(r"Position:\s*(\d+)", coerce=as_int),
            ),
        )
        assert extractor.extract("Rank: DNF\nPosition: 7") is None

    def test_no_match_returns_none(self) -> None:
        extractor = FieldExtractor(field_name="pace", patterns=(pattern(r"Pace:\s*(\S+)"),))
        assert extractor.extract("nothing here") is None


class TestCoercion:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("512", 512), ("1,204", 1204), (" 37 ", 37), ("DNF", None)],
    )
    def test_as_int(self, raw: str, expected: int | None) -> None:
        assert as_int(raw) == expected

    def test_as_text_collapses_whitespace(self) -> None:
        assert as_text("  Rahul \n  Sharma ") == "Rahul Sharma"
        assert as_text("   ") is None


class TestProfileValidation:
    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_profile(
                name="Broken",
                host_regex=r"broken\.example$",
                chains={"shoe_size": [pattern(r"Shoe:\s*(\d+)")]},
            )

    def test_fields_mapping_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            MYSAMAY.fields["name"] = MYSAMAY.fields["pace"]  # type: ignore[index]

import math

import pytest

from benchmarker.measurement.extractor import extract_duration, score_from_duration


class TestExtractDuration:
    def test_first_match_wins(self) -> None:
        assert extract_duration("Richards: 1234.56 us\nmore text 999 us") == 1234.56

    def test_integer_timing(self) -> None:
        assert extract_duration("42 us") == 42.0

    def test_timing_inside_other_output(self) -> None:
        output = "warming up\nDeltaBlue(RunTime): 870.3 us.\ndone"
        assert extract_duration(output) == 870.3

    @pytest.mark.parametrize(
        "output",
        ["", "no timing here", "12 ms", "12us", "us 12", "1.5 s"],
    )
    def test_missing_timing_is_nan(self, output: str) -> None:
        assert math.isnan(extract_duration(output))

    def test_trailing_dot_without_fraction(self) -> None:
        assert math.isnan(extract_duration("took 7. us"))

    def test_non_ascii_digits_are_ignored(self) -> None:
        assert math.isnan(extract_duration("١٢ us"))


class TestScoreFromDuration:
    def test_half_second_is_two_runs_per_second(self) -> None:
        assert score_from_duration(500000) == 2.0

    def test_one_microsecond(self) -> None:
        assert score_from_duration(1.0) == 1.0e6

    def test_nan_propagates(self) -> None:
        assert math.isnan(score_from_duration(math.nan))

    def test_zero_duration_is_infinite(self) -> None:
        assert score_from_duration(0.0) == math.inf

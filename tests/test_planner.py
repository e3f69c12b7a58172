"""Tests for the segment planner."""

import math

import pytest

from clipsplit.errors import InvalidInput, InvalidSliceLength
from clipsplit.models import SegmentDescriptor
from clipsplit.planner import output_name, parse_slice_seconds, plan


class TestPlanProperties:
    @pytest.mark.parametrize("slice_seconds", [1, 2, 7, 30, 60, 61, 500])
    def test_count_and_contiguity(self, slice_seconds):
        for total in list(range(0, 130)) + [599, 600, 601, 3600]:
            segments = plan(total, slice_seconds)
            assert len(segments) == math.ceil(total / slice_seconds)
            for i, seg in enumerate(segments):
                assert seg.index == i
                assert seg.start == i * slice_seconds
                assert seg.length == slice_seconds
            if segments:
                assert segments[-1].start < total
                assert segments[-1].end >= total

    def test_covers_duration_exactly_with_actual_lengths(self):
        segments = plan(125, 60)
        assert sum(s.actual_length(125) for s in segments) == 125

    def test_deterministic(self):
        assert plan(125, 60) == plan(125, 60)


class TestPlanScenarios:
    def test_uneven_split(self):
        segments = plan(125, 60)
        assert segments == [
            SegmentDescriptor(index=0, start=0, length=60),
            SegmentDescriptor(index=1, start=60, length=60),
            SegmentDescriptor(index=2, start=120, length=60),
        ]
        assert [s.actual_length(125) for s in segments] == [60, 60, 5]

    def test_exact_multiple(self):
        assert plan(60, 60) == [SegmentDescriptor(index=0, start=0, length=60)]

    def test_zero_duration(self):
        assert plan(0, 30) == []

    def test_slice_longer_than_video(self):
        segments = plan(10, 60)
        assert len(segments) == 1
        assert segments[0].actual_length(10) == 10


class TestPlanValidation:
    @pytest.mark.parametrize("slice_seconds", [0, -1, -60])
    def test_non_positive_slice(self, slice_seconds):
        for total in (0, 1, 125):
            with pytest.raises(InvalidSliceLength):
                plan(total, slice_seconds)

    @pytest.mark.parametrize("slice_seconds", [None, "abc", "", 1.5, True, [60]])
    def test_non_integer_slice(self, slice_seconds):
        with pytest.raises(InvalidInput):
            plan(125, slice_seconds)

    def test_slice_error_is_invalid_input(self):
        assert issubclass(InvalidSliceLength, InvalidInput)

    @pytest.mark.parametrize("total", [-1, None, 12.5, "125"])
    def test_bad_duration(self, total):
        with pytest.raises(InvalidInput, match="duration"):
            plan(total, 60)


class TestParseSliceSeconds:
    def test_accepts_ints_and_integral_strings(self):
        assert parse_slice_seconds(60) == 60
        assert parse_slice_seconds("60") == 60
        assert parse_slice_seconds(" 45 ") == 45
        assert parse_slice_seconds(30.0) == 30
        assert parse_slice_seconds("30.0") == 30

    @pytest.mark.parametrize("value", ["0", "-5", "1.5", "sixty", 0, False])
    def test_rejects(self, value):
        with pytest.raises(InvalidSliceLength):
            parse_slice_seconds(value)


class TestOutputName:
    def test_one_based(self):
        assert output_name(0) == "output_1.mp4"
        assert output_name(9) == "output_10.mp4"

    def test_container(self):
        assert output_name(2, "mkv") == "output_3.mkv"

"""Unit tests for ffutil — probing, trim arguments and progress parsing."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from clipsplit.ffutil import (
    FFmpegNotFoundError,
    check_ffmpeg,
    ffmpeg_version,
    parse_progress_line,
    probe,
    progress_fraction,
    trim_args,
)


# ---------------------------------------------------------------------------
# trim_args
# ---------------------------------------------------------------------------

class TestTrimArgs:
    def test_stream_copy_shape(self):
        assert trim_args("input.mp4", 120, 60, "output_3.mp4") == [
            "-i", "input.mp4",
            "-ss", "120",
            "-t", "60",
            "-c", "copy",
            "output_3.mp4",
        ]

    def test_seek_after_input(self):
        args = trim_args("input.mp4", 0, 30, "output_1.mp4")
        assert args.index("-i") < args.index("-ss")


# ---------------------------------------------------------------------------
# progress parsing (pure)
# ---------------------------------------------------------------------------

class TestParseProgressLine:
    def test_key_value(self):
        assert parse_progress_line("out_time_ms=1500000\n") == ("out_time_ms", "1500000")

    def test_value_with_equals(self):
        assert parse_progress_line("x=a=b") == ("x", "a=b")

    @pytest.mark.parametrize("line", ["", "   \n", "garbage"])
    def test_ignored(self, line):
        assert parse_progress_line(line) is None


class TestProgressFraction:
    def test_fraction(self):
        assert progress_fraction("30000000", 60) == 0.5

    def test_clamped(self):
        assert progress_fraction("90000000", 60) == 1.0
        assert progress_fraction("-5", 60) == 0.0

    def test_unknown_duration(self):
        assert progress_fraction("30000000", None) is None
        assert progress_fraction("30000000", 0) is None

    def test_non_numeric(self):
        assert progress_fraction("N/A", 60) is None


# ---------------------------------------------------------------------------
# probe (mocked subprocess)
# ---------------------------------------------------------------------------

PROBE_JSON = {
    "format": {"duration": "125.48"},
    "streams": [
        {
            "codec_type": "video",
            "codec_name": "h264",
            "width": 1920,
            "height": 1080,
            "r_frame_rate": "30/1",
        },
        {
            "codec_type": "audio",
            "codec_name": "aac",
            "sample_rate": "44100",
        },
    ],
}


class TestProbe:
    @patch("clipsplit.ffutil.subprocess.run")
    def test_basic(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(PROBE_JSON))
        result = probe(Path("video.mp4"))
        assert result.duration == 125.48
        assert result.width == 1920
        assert result.fps == 30.0
        assert result.codec_audio == "aac"
        assert result.audio_sample_rate == 44100

    @patch("clipsplit.ffutil.subprocess.run")
    def test_video_without_audio(self, mock_run):
        data = {"format": {"duration": "10.0"}, "streams": [PROBE_JSON["streams"][0]]}
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(data))
        result = probe(Path("video.mp4"))
        assert result.codec_audio is None
        assert result.audio_sample_rate is None

    @patch("clipsplit.ffutil.subprocess.run")
    def test_no_video_stream(self, mock_run):
        data = {"format": {"duration": "60.0"}, "streams": [PROBE_JSON["streams"][1]]}
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(data))
        with pytest.raises(ValueError, match="No video stream"):
            probe(Path("video.mp4"))

    @patch("clipsplit.ffutil.subprocess.run")
    def test_missing_duration(self, mock_run):
        data = {"format": {}, "streams": [PROBE_JSON["streams"][0]]}
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(data))
        with pytest.raises(ValueError, match="duration"):
            probe(Path("video.mp4"))


class TestCheckFfmpeg:
    @patch("clipsplit.ffutil.shutil.which", return_value=None)
    def test_missing(self, mock_which):
        with pytest.raises(FFmpegNotFoundError, match="ffmpeg not found"):
            check_ffmpeg()

    @patch("clipsplit.ffutil.shutil.which", return_value="/usr/bin/ffmpeg")
    def test_present(self, mock_which):
        check_ffmpeg()

    @patch("clipsplit.ffutil.subprocess.run")
    def test_version(self, mock_run):
        mock_run.return_value = MagicMock(stdout="ffmpeg version 6.1 Copyright\nbuilt with gcc\n")
        assert ffmpeg_version() == "ffmpeg version 6.1 Copyright"

"""Unit tests for the deep stream and compatibility probes."""

from dataclasses import replace

import pytest

from mkvdoctor.domain.enums import Severity, StreamType
from mkvdoctor.domain.media import FormatInfo, StreamInfo
from mkvdoctor.probes import CompatibilityProbe, DeepStreamProbe
from mkvdoctor.probes.deep_stream import normalized_level


def _warnings(result) -> list[str]:
    return [f.message for f in result.findings if f.severity == Severity.WARNING]


class TestNormalizedLevel:
    """Tests for codec level normalization."""

    @pytest.mark.parametrize(
        ("codec", "level", "expected"),
        [
            ("h264", 41, 4.1),
            ("h264", 52, 5.2),
            ("hevc", 153, 5.1),
            ("hevc", 156, 5.2),
        ],
    )
    def test_levels(self, codec, level, expected) -> None:
        stream = StreamInfo(index=0, stream_type=StreamType.VIDEO, codec=codec, level=level)
        assert normalized_level(stream) == pytest.approx(expected)

    @pytest.mark.parametrize(("codec", "level"), [("vp9", 52), ("h264", None)])
    def test_not_comparable(self, codec, level) -> None:
        stream = StreamInfo(index=0, stream_type=StreamType.VIDEO, codec=codec, level=level)
        assert normalized_level(stream) is None


class TestDeepStreamProbe:
    """Tests for DeepStreamProbe."""

    def test_typical_streams_pass(self, media, context) -> None:
        result = DeepStreamProbe().run(media, context)

        assert result.passed
        assert result.diagnostics == ("Deep stream issues: 0",)

    def test_video_issues(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [
            replace(video, profile="High 4:4:4 Predictive", level=52, pixel_format=None),
            audio,
        ]
        result = DeepStreamProbe().run(media, context)

        assert len(_warnings(result)) == 3
        assert result.findings[-1].severity == Severity.INFO
        assert result.findings[-1].detail == 3

    def test_level_below_limit_passes(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [replace(video, level=51), audio]
        assert DeepStreamProbe().run(media, context).passed

    def test_audio_channel_and_rate_limits(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [video, replace(audio, channels=10, sample_rate=192000)]
        result = DeepStreamProbe().run(media, context)

        assert _warnings(result) == [
            "Audio stream 1 has 10 channels",
            "Audio stream 1 has high sample rate 192000 Hz",
        ]

    def test_lossless_multichannel(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [video, replace(audio, codec="truehd", channels=8)]
        result = DeepStreamProbe().run(media, context)

        assert _warnings(result) == ["Audio stream 1 is truehd with 8 channels"]

    def test_lossless_six_channels_is_fine(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [video, replace(audio, codec="dts", channels=6)]
        assert DeepStreamProbe().run(media, context).passed


class TestCompatibilityProbe:
    """Tests for CompatibilityProbe."""

    def test_common_file_passes(self, media, context) -> None:
        assert CompatibilityProbe().run(media, context).passed

    def test_long_duration(self, media, context, stub) -> None:
        stub.format_info = FormatInfo(duration_seconds=4 * 3600 + 1, size_bytes=1)
        result = CompatibilityProbe().run(media, context)
        assert _warnings(result) == ["Very long duration: 4:00:01"]

    def test_exactly_four_hours_passes(self, media, context, stub) -> None:
        stub.format_info = FormatInfo(duration_seconds=4 * 3600, size_bytes=1)
        assert CompatibilityProbe().run(media, context).passed

    def test_large_file(self, media, context, stub) -> None:
        stub.format_info = FormatInfo(duration_seconds=60, size_bytes=11 * 1024**3)
        result = CompatibilityProbe().run(media, context)
        assert _warnings(result) == ["Very large file: 11.0 GB"]

    def test_size_falls_back_to_file_size(self, make_media, context, stub) -> None:
        stub.format_info = FormatInfo(duration_seconds=60, size_bytes=None)
        result = CompatibilityProbe().run(make_media(size=12 * 1024**3), context)
        assert len(_warnings(result)) == 1

    def test_long_tag(self, media, context, stub) -> None:
        stub.format_info = FormatInfo(
            duration_seconds=60, size_bytes=1, tags={"ARTIST": "x" * 101}
        )
        result = CompatibilityProbe().run(media, context)
        assert _warnings(result) == ["Tag 'artist' is 101 characters long"]

    def test_narrow_codecs(self, media, context, stub) -> None:
        video, audio = stub.streams
        stub.streams = [
            replace(video, codec="hevc"),
            replace(audio, codec="opus"),
            StreamInfo(index=2, stream_type=StreamType.AUDIO, codec="flac"),
        ]
        result = CompatibilityProbe().run(media, context)

        assert len(_warnings(result)) == 3

"""
Tests for codec negotiation and ffmpeg capability probing
"""
import subprocess
import unittest
from unittest.mock import patch

from slideshow_generator.encoding.codecs import (
    DEFAULT_CODEC,
    DEFAULT_PREFERENCES,
    FfmpegCapabilities,
    extension_for,
    negotiate,
    parse_encoder_list,
)


FFMPEG_ENCODERS_OUTPUT = """Encoders:
 V..... = Video
 A..... = Audio
 ------
 V....D libx264              libx264 H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10 (codec h264)
 V....D libvpx               libvpx VP8 (codec vp8)
 V....D mpeg4                MPEG-4 part 2
 A....D aac                  AAC (Advanced Audio Coding)
"""


class TestNegotiate(unittest.TestCase):
    def test_first_supported_identifier_wins(self):
        supported = {"video/webm;codecs=vp8", "video/mp4"}
        self.assertEqual(negotiate(DEFAULT_PREFERENCES, supported.__contains__), "video/mp4")

    def test_is_deterministic_for_a_fixed_predicate(self):
        supported = {"video/webm;codecs=vp9"}.__contains__
        first = negotiate(DEFAULT_PREFERENCES, supported)
        self.assertEqual(first, "video/webm;codecs=vp9")
        self.assertEqual(negotiate(DEFAULT_PREFERENCES, supported), first)

    def test_falls_back_to_default_without_raising(self):
        with self.assertLogs('slideshow_generator.encoding.codecs', level='ERROR'):
            self.assertEqual(negotiate(DEFAULT_PREFERENCES, lambda codec: False), DEFAULT_CODEC)

    def test_mp4_family_is_preferred(self):
        self.assertTrue(DEFAULT_PREFERENCES[0].startswith("video/mp4"))
        self.assertTrue(DEFAULT_PREFERENCES[-1].startswith("video/webm"))

    def test_extension_for(self):
        self.assertEqual(extension_for("video/mp4;codecs=h264"), "mp4")
        self.assertEqual(extension_for("video/webm;codecs=vp8"), "webm")
        self.assertEqual(extension_for("video/mp4;codecs=hevc"), "mp4")


class TestFfmpegCapabilities(unittest.TestCase):
    def test_parse_encoder_list_keeps_video_encoders_only(self):
        self.assertEqual(parse_encoder_list(FFMPEG_ENCODERS_OUTPUT), ["libx264", "libvpx", "mpeg4"])

    def test_encoder_mapping(self):
        caps = FfmpegCapabilities(list_encoders=lambda: ["libvpx", "mpeg4"])
        self.assertFalse(caps.is_supported("video/mp4;codecs=h264"))
        self.assertEqual(caps.encoder_for("video/mp4"), "mpeg4")
        self.assertEqual(caps.encoder_for("video/webm"), "libvpx")
        self.assertIsNone(caps.encoder_for("video/ogg"))
        self.assertEqual(negotiate(DEFAULT_PREFERENCES, caps.is_supported), "video/mp4")

    def test_encoder_list_is_probed_once(self):
        calls = []

        def list_encoders():
            calls.append(1)
            return ["libx264"]

        caps = FfmpegCapabilities(list_encoders=list_encoders)
        caps.is_supported("video/mp4")
        caps.is_supported("video/webm")
        self.assertEqual(len(calls), 1)

    @patch("slideshow_generator.encoding.codecs._default_ffmpeg_exe", return_value="ffmpeg")
    @patch("subprocess.run")
    def test_probe_parses_ffmpeg_output(self, mock_run, _exe):
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout=FFMPEG_ENCODERS_OUTPUT, stderr="")
        caps = FfmpegCapabilities()
        self.assertTrue(caps.is_supported("video/mp4;codecs=h264"))
        self.assertEqual(mock_run.call_args[0][0], ["ffmpeg", "-hide_banner", "-encoders"])

    @patch("slideshow_generator.encoding.codecs._default_ffmpeg_exe", side_effect=RuntimeError("no ffmpeg"))
    def test_probe_failure_means_nothing_supported(self, _exe):
        caps = FfmpegCapabilities()
        self.assertEqual(caps.encoders, frozenset())
        self.assertEqual(negotiate(DEFAULT_PREFERENCES, caps.is_supported), DEFAULT_CODEC)


if __name__ == "__main__":
    unittest.main()

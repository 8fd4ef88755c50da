import json
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from roundclip.modules.base import Segment, ToolTimeouts, TranscodeSettings
from roundclip.modules.exceptions import ToolError
from roundclip.modules.media_tools import SubprocessMediaTools


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> Mock:
    return Mock(stdout=stdout, returncode=returncode, stderr=stderr)


class TestCommands:
    @pytest.fixture
    def tools(self):
        return SubprocessMediaTools()

    def test_probe_remote_command(self, tools):
        cmd = tools.build_probe_remote_command("https://youtu.be/abc", {"User-Agent": "UA"})

        assert cmd == ["yt-dlp", "--no-warnings", "--add-header", "User-Agent: UA", "--dump-single-json", "https://youtu.be/abc"]

    def test_download_command(self, tools):
        cmd = tools.build_download_command("https://youtu.be/abc", Path("/tmp/job/youtube-abc.mp4"), "mp4")

        assert cmd == ["yt-dlp", "--no-warnings", "-f", "mp4", "-o", "/tmp/job/youtube-abc.mp4", "https://youtu.be/abc"]

    def test_transcode_command(self, tools):
        cmd = tools.build_transcode_command(
            Path("in.mp4"), Path("out.mp4"), Segment(1, 60, 5.5), TranscodeSettings()
        )

        assert cmd[:3] == ["ffmpeg", "-y", "-hide_banner"]
        assert cmd[cmd.index("-ss") + 1] == "60"
        assert cmd[cmd.index("-t") + 1] == "5.5"
        assert cmd[cmd.index("-vf") + 1] == TranscodeSettings().filter_chain
        assert cmd[cmd.index("-c:v") + 1] == "libx264"
        assert cmd[cmd.index("-crf") + 1] == "23"
        assert cmd[cmd.index("-b:a") + 1] == "128k"
        assert cmd[cmd.index("-movflags") + 1] == "+faststart"
        assert cmd[-1] == "out.mp4"

    def test_custom_binaries(self):
        tools = SubprocessMediaTools(ytdlp_binary="/opt/yt-dlp", ffprobe_binary="/opt/ffprobe")

        assert tools.build_probe_remote_command("u")[0] == "/opt/yt-dlp"
        assert tools.build_probe_duration_command(Path("x.mp4"))[0] == "/opt/ffprobe"


class TestRunner:
    @pytest.fixture
    def tools(self):
        return SubprocessMediaTools(timeouts=ToolTimeouts(probe=5, download=50, transcode=70))

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_probe_remote_parses_json(self, mock_run, tools):
        mock_run.return_value = completed(json.dumps({"id": "abc", "duration": 125, "title": "Test"}))

        info = tools.probe_remote("https://youtu.be/abc")

        assert info.content_id == "abc"
        assert info.duration == 125.0
        assert info.title == "Test"
        assert mock_run.call_args.kwargs["timeout"] == 5

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_probe_remote_without_duration(self, mock_run, tools):
        mock_run.return_value = completed(json.dumps({"id": "live1", "is_live": True}))

        assert tools.probe_remote("https://youtu.be/live1").duration is None

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_probe_remote_bad_json(self, mock_run, tools):
        mock_run.return_value = completed("not json")

        with pytest.raises(ToolError):
            tools.probe_remote("https://youtu.be/abc")

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_probe_duration(self, mock_run, tools):
        mock_run.return_value = completed('{"format": {"duration": "61.200000"}}')

        assert tools.probe_duration(Path("in.mp4")) == pytest.approx(61.2)

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_probe_duration_missing(self, mock_run, tools):
        mock_run.return_value = completed('{"format": {}}')

        with pytest.raises(ToolError):
            tools.probe_duration(Path("in.mp4"))

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_nonzero_exit(self, mock_run, tools):
        mock_run.return_value = completed(returncode=1, stderr="ERROR: Video unavailable")

        with pytest.raises(ToolError) as exc_info:
            tools.download("https://youtu.be/abc", Path("out.mp4"), "mp4")

        assert exc_info.value.returncode == 1
        assert "Video unavailable" in exc_info.value.stderr
        assert mock_run.call_args.kwargs["timeout"] == 50

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_timeout(self, mock_run, tools):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=70)

        with pytest.raises(ToolError) as exc_info:
            tools.transcode(Path("in.mp4"), Path("out.mp4"), Segment(0, 0, 60), TranscodeSettings())

        assert exc_info.value.timed_out
        assert mock_run.call_args.kwargs["timeout"] == 70

    @patch("roundclip.modules.media_tools.subprocess.run")
    def test_missing_binary(self, mock_run, tools):
        mock_run.side_effect = FileNotFoundError()

        with pytest.raises(ToolError) as exc_info:
            tools.probe_duration(Path("in.mp4"))
        assert "not found" in exc_info.value.stderr

"""
Media Tools

Обёртка над внешними командами: yt-dlp (проба и скачивание),
ffprobe (длительность) и ffmpeg (нарезка в видео-кружок).
Конвейер работает только через интерфейс MediaTools, поэтому
в тестах его легко подменить.
"""
import json
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from .base import RemoteInfo, Segment, ToolTimeouts, TranscodeSettings
from .exceptions import ToolError

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class MediaTools(ABC):
    """Интерфейс внешних инструментов"""

    @abstractmethod
    def probe_remote(self, url: str, headers: Optional[Dict[str, str]] = None) -> RemoteInfo:
        """Метаданные по ссылке без скачивания видео"""

    @abstractmethod
    def download(
        self,
        url: str,
        output_path: Path,
        format_hint: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Скачивает видео по ссылке в output_path"""

    @abstractmethod
    def probe_duration(self, path: Path) -> float:
        """Длительность локального файла в секундах"""

    @abstractmethod
    def transcode(
        self,
        input_path: Path,
        output_path: Path,
        segment: Segment,
        settings: TranscodeSettings,
    ) -> None:
        """Кодирует один сегмент в квадратный видео-кружок"""


class SubprocessMediaTools(MediaTools):
    """
    Реализация MediaTools через subprocess

    Все команды синхронные, из async-кода их вызывают через asyncio.to_thread.
    """

    def __init__(
        self,
        ytdlp_binary: str = "yt-dlp",
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
        timeouts: Optional[ToolTimeouts] = None,
    ):
        self.ytdlp_binary = ytdlp_binary
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary
        self.timeouts = timeouts or ToolTimeouts()

    # ------------------------------------------------------------------
    # Command builders
    # ------------------------------------------------------------------

    def _ytdlp_command(
        self,
        url: str,
        extra_args: List[str],
        headers: Optional[Dict[str, str]] = None,
    ) -> List[str]:
        """Строит команду yt-dlp"""
        cmd = [self.ytdlp_binary, "--no-warnings"]

        for key, value in (headers or {}).items():
            cmd.extend(["--add-header", f"{key}: {value}"])

        cmd.extend(extra_args)
        cmd.append(url)
        return cmd

    def build_probe_remote_command(self, url: str, headers: Optional[Dict[str, str]] = None) -> List[str]:
        return self._ytdlp_command(url, ["--dump-single-json"], headers)

    def build_download_command(
        self,
        url: str,
        output_path: Path,
        format_hint: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[str]:
        return self._ytdlp_command(url, ["-f", format_hint, "-o", str(output_path)], headers)

    def build_probe_duration_command(self, path: Path) -> List[str]:
        return [
            self.ffprobe_binary,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "json",
            str(path),
        ]

    def build_transcode_command(
        self,
        input_path: Path,
        output_path: Path,
        segment: Segment,
        settings: TranscodeSettings,
    ) -> List[str]:
        return [
            self.ffmpeg_binary,
            "-y",
            "-hide_banner",
            "-loglevel", "error",
            "-ss", str(segment.start),
            "-i", str(input_path),
            "-t", str(segment.duration),
            "-vf", settings.filter_chain,
            "-c:v", settings.video_codec,
            "-preset", settings.preset,
            "-crf", str(settings.crf),
            "-c:a", settings.audio_codec,
            "-b:a", settings.audio_bitrate,
            "-movflags", "+faststart",
            "-f", settings.container,
            str(output_path),
        ]

    # ------------------------------------------------------------------
    # Runner
    # ------------------------------------------------------------------

    def _run(self, tool: str, cmd: List[str], timeout: float) -> subprocess.CompletedProcess:
        """Запускает команду, превращая ошибки в ToolError"""
        logger.debug(f"$ {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"⏱️  {tool} timeout after {timeout}s")
            raise ToolError(tool, timed_out=True)
        except FileNotFoundError:
            raise ToolError(tool, stderr=f"{cmd[0]} not found in PATH")

        if result.returncode != 0:
            logger.error(f"❌ {tool} failed: {result.stderr[:200]}")
            raise ToolError(tool, result.returncode, result.stderr)

        return result

    # ------------------------------------------------------------------
    # MediaTools
    # ------------------------------------------------------------------

    def probe_remote(self, url: str, headers: Optional[Dict[str, str]] = None) -> RemoteInfo:
        result = self._run("yt-dlp", self.build_probe_remote_command(url, headers), self.timeouts.probe)

        try:
            metadata = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ToolError("yt-dlp", result.returncode, f"invalid JSON: {e}")

        if not isinstance(metadata, dict):
            raise ToolError("yt-dlp", result.returncode, "metadata is not an object")

        duration = metadata.get("duration")
        return RemoteInfo(
            content_id=metadata.get("id"),
            duration=float(duration) if duration is not None else None,
            title=metadata.get("title"),
            raw=metadata,
        )

    def download(
        self,
        url: str,
        output_path: Path,
        format_hint: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        cmd = self.build_download_command(url, output_path, format_hint, headers)
        self._run("yt-dlp", cmd, self.timeouts.download)

    def probe_duration(self, path: Path) -> float:
        result = self._run("ffprobe", self.build_probe_duration_command(path), self.timeouts.probe)

        try:
            data = json.loads(result.stdout)
            return float(data["format"]["duration"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ToolError("ffprobe", result.returncode, f"no duration in output: {e}")

    def transcode(
        self,
        input_path: Path,
        output_path: Path,
        segment: Segment,
        settings: TranscodeSettings,
    ) -> None:
        cmd = self.build_transcode_command(input_path, output_path, segment, settings)
        self._run("ffmpeg", cmd, self.timeouts.transcode)

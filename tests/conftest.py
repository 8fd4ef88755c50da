"""
Pytest Configuration and Fixtures
==================================

Общие фикстуры и подделки внешних инструментов для всех тестов.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from roundclip.modules.base import MaterializePolicy, RemoteInfo, Segment, TranscodeSettings
from roundclip.modules.delivery import Artifact, ArtifactKind, DeliverySink, FileFetcher, Notifier
from roundclip.modules.exceptions import DeliveryFailure, ToolError
from roundclip.modules.interaction import VideoNoteFlow
from roundclip.modules.materializer import SourceMaterializer
from roundclip.modules.media_tools import MediaTools
from roundclip.modules.pending_store import PendingSelectionStore
from roundclip.modules.segmenter import SegmentPipeline


class FakeMediaTools(MediaTools):
    """
    Подделка yt-dlp / ffprobe / ffmpeg

    Записывает все вызовы и создаёт выходные файлы, как настоящие команды.
    """

    def __init__(
        self,
        remote_duration: Optional[float] = 30.0,
        remote_id: Optional[str] = None,
        local_duration: Optional[float] = 30.0,
    ):
        self.remote_duration = remote_duration
        self.remote_id = remote_id
        self.local_duration = local_duration
        self.calls: List[tuple] = []
        self.probe_remote_error: Optional[Exception] = None
        self.download_error: Optional[Exception] = None
        self.probe_duration_error: Optional[Exception] = None
        self.transcode_fail_on: Optional[int] = None
        self.download_creates_file = True

    def probe_remote(self, url: str, headers: Optional[Dict[str, str]] = None) -> RemoteInfo:
        self.calls.append(("probe_remote", url, headers))
        if self.probe_remote_error:
            raise self.probe_remote_error
        return RemoteInfo(content_id=self.remote_id, duration=self.remote_duration, title="Test Video")

    def download(self, url, output_path, format_hint, headers=None) -> None:
        self.calls.append(("download", url, Path(output_path), format_hint, headers))
        if self.download_error:
            raise self.download_error
        if self.download_creates_file:
            Path(output_path).write_bytes(b"source video")

    def probe_duration(self, path: Path) -> float:
        self.calls.append(("probe_duration", Path(path)))
        if self.probe_duration_error:
            raise self.probe_duration_error
        return self.local_duration

    def transcode(self, input_path, output_path, segment: Segment, settings: TranscodeSettings) -> None:
        self.calls.append(("transcode", Path(input_path), Path(output_path), segment))
        if self.transcode_fail_on == segment.index:
            raise ToolError("ffmpeg", 1, "Conversion failed!")
        Path(output_path).write_bytes(f"note {segment.index}".encode())

    def called(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


class RecordingNotifier(Notifier):
    """Собирает сообщения пользователю"""

    def __init__(self):
        self.notices: List[tuple] = []
        self.prompts: List[tuple] = []

    async def notify(self, key: str, *args: Any) -> None:
        self.notices.append((key, *args))

    async def ask_format(self, round_data: str, regular_data: str) -> None:
        self.prompts.append((round_data, regular_data))

    @property
    def keys(self) -> List[str]:
        return [notice[0] for notice in self.notices]


class RecordingSink(DeliverySink):
    """Собирает отправленные результаты, может отказать на N-й отправке"""

    def __init__(self, fail_on: Optional[int] = None):
        self.fail_on = fail_on
        self.delivered: List[Artifact] = []
        self.attempts = 0
        # Снимок рабочей папки в момент отправки полного видео
        self.seen_paths: List[Path] = []

    async def deliver(self, artifact: Artifact, chat_ref: Any) -> None:
        index = self.attempts
        self.attempts += 1
        if artifact.kind is ArtifactKind.FULL_VIDEO:
            self.seen_paths.append(artifact.path)
            assert artifact.path.exists()
        if self.fail_on == index:
            raise DeliveryFailure("Bad Request: VOICE_MESSAGES_FORBIDDEN")
        self.delivered.append(artifact)


class FakeFetcher(FileFetcher):
    """Подделка скачивания загруженного файла"""

    def __init__(self, content: bytes = b"uploaded video", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[tuple] = []

    async def fetch(self, file_id: str, destination: Path) -> None:
        self.calls.append((file_id, Path(destination)))
        if self.error:
            raise self.error
        Path(destination).write_bytes(self.content)


@pytest.fixture
def tools():
    return FakeMediaTools()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def work_root(tmp_path):
    root = tmp_path / "temp"
    root.mkdir()
    return root


@pytest.fixture
def make_flow(work_root, fetcher):
    """Фабрика автомата с подменёнными инструментами"""

    def _make(tools: MediaTools, sink: DeliverySink, policy: Optional[MaterializePolicy] = None) -> VideoNoteFlow:
        return VideoNoteFlow(
            link_store=PendingSelectionStore(namespace="link"),
            upload_store=PendingSelectionStore(namespace="file"),
            materializer=SourceMaterializer(tools, fetcher=fetcher, policy=policy),
            pipeline=SegmentPipeline(tools),
            sink=sink,
            work_root=work_root,
        )

    return _make

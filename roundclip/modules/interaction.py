"""
Interaction State Machine

Idle -> AwaitingFormatChoice -> Processing -> Idle

1. Пользователь присылает ссылку или видео -> регистрируем токен и
   показываем кнопки "кружок / обычное".
2. Пользователь нажимает кнопку -> гасим токен (ровно один раз),
   скачиваем, режем или отправляем как есть, чистим временные файлы.
"""
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Set, Tuple

from .base import (
    ContentReference,
    FormatMode,
    LengthNotice,
    LinkReference,
    Platform,
    PipelineCompleted,
    SegmentFailed,
    SegmentStarted,
    UploadDescriptor,
)
from .classifier import classify, classify_upload
from .delivery import Artifact, DeliverySink, Notifier
from .exceptions import (
    DeliveryFailure,
    MaterializationFailure,
    PolicyViolation,
    ProbeFailure,
    RoundClipError,
    StaleSelection,
    TranscodeFailure,
    UnrecognizedReference,
)
from .materializer import SourceMaterializer, check_upload
from .pending_store import PendingSelectionStore
from .segmenter import SegmentPipeline
from .workspace import JobWorkspace

logger = logging.getLogger(__name__)

CHOICE_PATTERN = re.compile(r"^(round|regular)_(file_)?(.+)$")


class FlowState(Enum):
    IDLE = "idle"
    AWAITING_FORMAT_CHOICE = "awaiting_format_choice"
    PROCESSING = "processing"


class JobOutcome(Enum):
    COMPLETED = "completed"  # Все части отправлены
    PARTIAL = "partial"      # Отправка кружка не удалась, остальные части пропущены
    FAILED = "failed"
    STALE = "stale"          # Токен уже погашен


@dataclass(frozen=True)
class FlowStep:
    """Результат одного шага автомата"""
    state: FlowState
    token: Optional[str] = None
    outcome: Optional[JobOutcome] = None


def choice_data(mode: FormatMode, token: str, upload: bool = False) -> str:
    """callback_data для кнопки выбора формата"""
    return f"{mode.value}_file_{token}" if upload else f"{mode.value}_{token}"


def parse_choice(data: str) -> Tuple[FormatMode, bool, str]:
    """
    Разбирает callback_data кнопки выбора

    Returns:
        (режим, это загрузка файла, токен)

    Raises:
        StaleSelection: данные не похожи на выбор формата
    """
    match = CHOICE_PATTERN.match(data or "")
    if not match:
        raise StaleSelection(data or "")
    return FormatMode(match.group(1)), bool(match.group(2)), match.group(3)


def error_notice(error: Exception) -> str:
    """Ключ перевода для ошибки задачи"""
    if isinstance(error, UnrecognizedReference):
        return "invalid_instagram_link"
    if isinstance(error, PolicyViolation):
        return "video_too_large" if error.reason == PolicyViolation.TOO_LARGE else "video_too_long"
    if isinstance(error, (ProbeFailure, TranscodeFailure)):
        return "error_processing_video"
    if isinstance(error, MaterializationFailure):
        if error.not_found:
            return "video_not_found"
        return {
            Platform.INSTAGRAM.value: "instagram_download_failed",
            Platform.YOUTUBE.value: "error_processing_youtube",
            "upload": "error_processing_file",
        }.get(error.platform, "error_processing_video")
    if isinstance(error, DeliveryFailure):
        return "send_video_failed"
    if isinstance(error, StaleSelection):
        return "selection_expired"
    return "error_general"


def download_notice(reference: ContentReference) -> str:
    if isinstance(reference, LinkReference):
        if reference.platform is Platform.YOUTUBE:
            return "downloading_from_youtube"
        return "downloading_from_instagram"
    return "downloading_video"


class VideoNoteFlow:
    """
    Автомат взаимодействия

    Хранилища токенов для ссылок и для загруженных файлов разные,
    поэтому токены из разных пространств не пересекаются.
    """

    def __init__(
        self,
        link_store: PendingSelectionStore,
        upload_store: PendingSelectionStore,
        materializer: SourceMaterializer,
        pipeline: SegmentPipeline,
        sink: DeliverySink,
        work_root: Path,
    ):
        self.link_store = link_store
        self.upload_store = upload_store
        self.materializer = materializer
        self.pipeline = pipeline
        self.sink = sink
        self.work_root = Path(work_root)
        # Задачи в состоянии Processing
        self.processing: Set[str] = set()

    def state_of(self, job_id: str) -> FlowState:
        return FlowState.PROCESSING if job_id in self.processing else FlowState.IDLE

    # ------------------------------------------------------------------
    # Idle -> AwaitingFormatChoice
    # ------------------------------------------------------------------

    async def handle_text(self, text: str, notifier: Notifier) -> FlowStep:
        """Входящий текст: ссылка или что-то неподдерживаемое"""
        reference = classify(text)
        if reference is None:
            await notifier.notify("invalid_url")
            return FlowStep(FlowState.IDLE)

        token = self.link_store.register(reference)
        logger.info(f"🔗 {reference.platform.value} link registered as {token}")

        return await self._ask_format(self.link_store, token, notifier, upload=False)

    async def handle_upload(self, descriptor: UploadDescriptor, notifier: Notifier) -> FlowStep:
        """Входящее видео: проверяем размер до регистрации"""
        try:
            reference = classify_upload(descriptor)
        except UnrecognizedReference:
            await notifier.notify("video_id_not_found")
            return FlowStep(FlowState.IDLE)

        try:
            check_upload(descriptor, self.materializer.policy)
        except PolicyViolation as e:
            logger.warning(f"⛔ Upload rejected: {e}")
            await notifier.notify("video_too_large")
            return FlowStep(FlowState.IDLE)

        token = self.upload_store.register(reference)
        logger.info(f"📎 Upload registered as {token} ({descriptor.file_size} bytes)")

        return await self._ask_format(self.upload_store, token, notifier, upload=True)

    async def _ask_format(
        self,
        store: PendingSelectionStore,
        token: str,
        notifier: Notifier,
        upload: bool,
    ) -> FlowStep:
        """
        Показывает кнопки выбора формата

        Если кнопки не отправились, токен снимается с регистрации:
        нажать на него уже некому.
        """
        try:
            await notifier.ask_format(
                choice_data(FormatMode.ROUND, token, upload=upload),
                choice_data(FormatMode.REGULAR, token, upload=upload),
            )
        except Exception as e:
            logger.error(f"[{store.namespace}] Failed to send format choice for {token}: {e}", exc_info=True)
            try:
                store.consume(token)
            except StaleSelection:
                # Уже вытеснен по TTL или лимиту
                pass
            return FlowStep(FlowState.IDLE)

        return FlowStep(FlowState.AWAITING_FORMAT_CHOICE, token=token)

    # ------------------------------------------------------------------
    # AwaitingFormatChoice -> Processing
    # ------------------------------------------------------------------

    async def handle_choice(self, data: str, chat_ref: Any, notifier: Notifier) -> FlowStep:
        """Нажатие кнопки выбора формата"""
        try:
            mode, is_upload, token = parse_choice(data)
            store = self.upload_store if is_upload else self.link_store
            reference = store.consume(token)
        except StaleSelection as e:
            # Обычная гонка: двойное нажатие или кнопка после перезапуска
            logger.warning(f"Stale selection: {e.token}")
            await notifier.notify("selection_expired")
            return FlowStep(FlowState.IDLE, outcome=JobOutcome.STALE)

        job_id = f"{store.namespace}-{token}"
        return await self.run_job(reference, mode, chat_ref, notifier, job_id=job_id)

    # ------------------------------------------------------------------
    # Processing -> Idle
    # ------------------------------------------------------------------

    async def run_job(
        self,
        reference: ContentReference,
        mode: FormatMode,
        chat_ref: Any,
        notifier: Notifier,
        job_id: Optional[str] = None,
    ) -> FlowStep:
        """
        Выполняет задачу целиком

        Любая ошибка превращается в одно сообщение пользователю,
        временные файлы удаляются при любом исходе.
        """
        workspace = JobWorkspace(self.work_root, job_id or format(time.time_ns(), "x"))
        outcome = JobOutcome.FAILED
        self.processing.add(workspace.job_id)

        try:
            workspace.create()
            await notifier.notify(download_notice(reference))
            input_path = await self.materializer.materialize(reference, workspace)

            if mode is FormatMode.REGULAR:
                await self.sink.deliver(Artifact.full_video(input_path), chat_ref)
                outcome = JobOutcome.COMPLETED
            else:
                outcome = await self._run_round(input_path, workspace, chat_ref, notifier)

        except RoundClipError as e:
            logger.warning(f"Job {workspace.job_id} failed: {e}")
            await notifier.notify(error_notice(e))
        except Exception as e:
            logger.error(f"Job {workspace.job_id} crashed: {e}", exc_info=True)
            await notifier.notify("error_general")
        finally:
            workspace.cleanup()
            self.processing.discard(workspace.job_id)

        logger.info(f"Job {workspace.job_id} finished: {outcome.value}")
        return FlowStep(FlowState.IDLE, outcome=outcome)

    async def _run_round(
        self,
        input_path: Path,
        workspace: JobWorkspace,
        chat_ref: Any,
        notifier: Notifier,
    ) -> JobOutcome:
        async def deliver(data: bytes) -> None:
            await self.sink.deliver(Artifact.round_note(data), chat_ref)

        outcome = JobOutcome.FAILED
        async for event in self.pipeline.run(input_path, workspace, deliver):
            if isinstance(event, LengthNotice):
                await notifier.notify("video_longer_than_minute", event.duration_seconds, event.segment_count)
            elif isinstance(event, SegmentStarted):
                await notifier.notify("processing_part", event.index + 1, event.segment_count)
            elif isinstance(event, SegmentFailed):
                await notifier.notify("send_note_failed")
                outcome = JobOutcome.PARTIAL
            elif isinstance(event, PipelineCompleted):
                await notifier.notify("done")
                outcome = JobOutcome.COMPLETED
        return outcome

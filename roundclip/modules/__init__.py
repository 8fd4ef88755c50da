"""
roundclip modules - ядро конвейера

Не зависит от Telegram: транспорт подключается через интерфейсы
из delivery.py.
"""

# Базовые типы
from .base import (
    Platform,
    FormatMode,
    LinkReference,
    UploadReference,
    UploadDescriptor,
    RemoteInfo,
    Segment,
    TranscodeSettings,
    MaterializePolicy,
    ToolTimeouts,
    plan_segments,
    segment_count,
)

# Ошибки
from .exceptions import (
    RoundClipError,
    UnrecognizedReference,
    PolicyViolation,
    MaterializationFailure,
    ProbeFailure,
    TranscodeFailure,
    DeliveryFailure,
    StaleSelection,
    ToolError,
)

# Компоненты
from .classifier import classify, classify_upload, extract_instagram_id, extract_youtube_id
from .pending_store import PendingSelectionStore, PendingSelection
from .workspace import JobWorkspace
from .media_tools import MediaTools, SubprocessMediaTools
from .materializer import SourceMaterializer, check_upload
from .segmenter import SegmentPipeline
from .delivery import Artifact, ArtifactKind, DeliverySink, FileFetcher, Notifier

# Автомат взаимодействия (главный интерфейс)
from .interaction import VideoNoteFlow, FlowState, FlowStep, JobOutcome

__all__ = [
    'Platform',
    'FormatMode',
    'LinkReference',
    'UploadReference',
    'UploadDescriptor',
    'RemoteInfo',
    'Segment',
    'TranscodeSettings',
    'MaterializePolicy',
    'ToolTimeouts',
    'plan_segments',
    'segment_count',

    'RoundClipError',
    'UnrecognizedReference',
    'PolicyViolation',
    'MaterializationFailure',
    'ProbeFailure',
    'TranscodeFailure',
    'DeliveryFailure',
    'StaleSelection',
    'ToolError',

    'classify',
    'classify_upload',
    'extract_instagram_id',
    'extract_youtube_id',
    'PendingSelectionStore',
    'PendingSelection',
    'JobWorkspace',
    'MediaTools',
    'SubprocessMediaTools',
    'SourceMaterializer',
    'check_upload',
    'SegmentPipeline',
    'Artifact',
    'ArtifactKind',
    'DeliverySink',
    'FileFetcher',
    'Notifier',

    'VideoNoteFlow',
    'FlowState',
    'FlowStep',
    'JobOutcome',
]

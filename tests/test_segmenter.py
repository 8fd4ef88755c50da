import asyncio
import math

import pytest

from conftest import FakeMediaTools
from roundclip.modules.base import (
    LengthNotice,
    PipelineCompleted,
    SegmentDelivered,
    SegmentFailed,
    SegmentStarted,
    TranscodeSettings,
    plan_segments,
    segment_count,
)
from roundclip.modules.exceptions import DeliveryFailure, ProbeFailure, ToolError, TranscodeFailure
from roundclip.modules.segmenter import SegmentPipeline
from roundclip.modules.workspace import JobWorkspace


def collect(pipeline, input_path, workspace, deliver):
    async def _collect():
        return [event async for event in pipeline.run(input_path, workspace, deliver)]

    return asyncio.run(_collect())


class TestSegmentArithmetic:
    @pytest.mark.parametrize("duration, expected", [
        (0.5, 1),
        (59, 1),
        (60, 1),
        (61, 2),
        (125, 3),
        (600, 10),
    ])
    def test_segment_count(self, duration, expected):
        assert segment_count(duration) == expected

    @pytest.mark.parametrize("duration", [0, -1, None, math.inf, math.nan])
    def test_invalid_duration(self, duration):
        with pytest.raises(ValueError):
            segment_count(duration)

    def test_plan_covers_duration(self):
        segments = plan_segments(125)

        assert [s.index for s in segments] == [0, 1, 2]
        assert [s.start for s in segments] == [0, 60, 120]
        assert segments[-1].duration == 5
        assert all(s.duration <= 60 for s in segments)

    def test_filter_chain(self):
        assert TranscodeSettings().filter_chain == (
            "crop=min(iw\\,ih):min(iw\\,ih),"
            "scale=384:384:force_original_aspect_ratio=increase,"
            "crop=384:384"
        )


class TestSegmentPipeline:
    @pytest.fixture
    def workspace(self, work_root):
        workspace = JobWorkspace(work_root, "seg")
        workspace.create()
        yield workspace
        workspace.cleanup()

    @pytest.fixture
    def input_path(self, workspace):
        path = workspace.input_path("input.mp4")
        path.write_bytes(b"source")
        return path

    def make_deliver(self, fail_on=None):
        delivered = []

        async def deliver(data: bytes) -> None:
            if fail_on == len(delivered):
                raise DeliveryFailure("rejected")
            delivered.append(data)

        return deliver, delivered

    def test_short_video_single_segment(self, workspace, input_path):
        tools = FakeMediaTools(local_duration=45)
        deliver, delivered = self.make_deliver()

        events = collect(SegmentPipeline(tools), input_path, workspace, deliver)

        assert events == [SegmentStarted(0, 1), SegmentDelivered(0), PipelineCompleted(1)]
        assert delivered == [b"note 0"]

    def test_long_video_in_order(self, workspace, input_path):
        tools = FakeMediaTools(local_duration=125.4)
        deliver, delivered = self.make_deliver()

        events = collect(SegmentPipeline(tools), input_path, workspace, deliver)

        assert events[0] == LengthNotice(125, 3)
        assert events[1:] == [
            SegmentStarted(0, 3), SegmentDelivered(0),
            SegmentStarted(1, 3), SegmentDelivered(1),
            SegmentStarted(2, 3), SegmentDelivered(2),
            PipelineCompleted(3),
        ]
        assert delivered == [b"note 0", b"note 1", b"note 2"]

        transcodes = tools.called("transcode")
        assert [call[3].start for call in transcodes] == [0, 60, 120]
        assert transcodes[0][2].name == "output-seg-0.mp4"

    def test_segments_removed_after_use(self, workspace, input_path):
        tools = FakeMediaTools(local_duration=125)
        deliver, _ = self.make_deliver()

        collect(SegmentPipeline(tools), input_path, workspace, deliver)

        assert workspace.files() == [input_path]

    def test_delivery_failure_stops_pipeline(self, workspace, input_path):
        """Отказ на сегменте 1 из 3: сегмент 2 не кодируется и не отправляется"""
        tools = FakeMediaTools(local_duration=150)
        deliver, delivered = self.make_deliver(fail_on=1)

        events = collect(SegmentPipeline(tools), input_path, workspace, deliver)

        assert delivered == [b"note 0"]
        assert isinstance(events[-1], SegmentFailed)
        assert events[-1].index == 1
        assert not any(isinstance(e, PipelineCompleted) for e in events)
        assert len(tools.called("transcode")) == 2
        assert workspace.files() == [input_path]

    def test_probe_failure(self, workspace, input_path):
        tools = FakeMediaTools()
        tools.probe_duration_error = ToolError("ffprobe", 1, "Invalid data found")
        deliver, _ = self.make_deliver()

        with pytest.raises(ProbeFailure):
            collect(SegmentPipeline(tools), input_path, workspace, deliver)

    def test_zero_duration_is_probe_failure(self, workspace, input_path):
        tools = FakeMediaTools(local_duration=0)
        deliver, _ = self.make_deliver()

        with pytest.raises(ProbeFailure):
            collect(SegmentPipeline(tools), input_path, workspace, deliver)

    def test_transcode_failure(self, workspace, input_path):
        tools = FakeMediaTools(local_duration=90)
        tools.transcode_fail_on = 1
        deliver, delivered = self.make_deliver()

        with pytest.raises(TranscodeFailure) as exc_info:
            collect(SegmentPipeline(tools), input_path, workspace, deliver)

        assert exc_info.value.segment_index == 1
        assert delivered == [b"note 0"]
        assert workspace.files() == [input_path]

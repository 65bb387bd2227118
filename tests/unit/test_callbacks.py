"""Tests for pipeline callbacks."""

import io

import pytest

from hakbuild import output
from hakbuild.callbacks import ConsoleCallback, NullCallback, PipelineCallback
from hakbuild.models import SUCCESS, PipelineState, StageOutcome


def test_implementations_satisfy_protocol(recording_callback):
    assert isinstance(NullCallback(), PipelineCallback)
    assert isinstance(ConsoleCallback(), PipelineCallback)
    assert isinstance(recording_callback, PipelineCallback)


class TestConsoleCallback:
    @pytest.fixture
    def stream(self, monkeypatch):
        buffer = io.StringIO()
        monkeypatch.setattr(output, "_output_stream", buffer)
        return buffer

    def test_phase_lines_are_one_based(self, stream):
        ConsoleCallback().on_stage_start(0, 3, "build-openssl")
        assert stream.getvalue().rstrip().endswith("[1/3] build-openssl...")

    def test_success_is_quiet_per_stage(self, stream):
        ConsoleCallback().on_stage_end(0, 2, "build-sqlcipher-unix", SUCCESS)
        assert stream.getvalue() == ""

    def test_failure_is_reported(self, stream):
        ConsoleCallback().on_stage_end(1, 2, "build-module", StageOutcome.non_zero_exit(101))
        assert "ERROR: build-module exited with code 101" in stream.getvalue()

    @pytest.mark.parametrize(
        "state,text",
        [(PipelineState.SUCCEEDED, "Native build succeeded"), (PipelineState.FAILED, "ERROR: Native build failed")],
    )
    def test_pipeline_end(self, stream, state, text):
        ConsoleCallback().on_pipeline_end(state, 3.0)
        assert text in stream.getvalue()

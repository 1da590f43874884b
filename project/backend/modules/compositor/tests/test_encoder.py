"""
Unit tests for encoder module.
"""
import pytest
from unittest.mock import patch, AsyncMock

from modules.compositor.asset_store import AssetStore
from modules.compositor.encoder import MediaEncoderGateway
from shared.errors import CompositionError, PipelineFatalError
from shared.models.video import MixPlan, MixTrack


@pytest.fixture
def store(tmp_path):
    return AssetStore(tmp_path / "run")


def _write_output(path, content=b"x" * 2048):
    def _side_effect(cmd, **kwargs):
        path.write_bytes(content)
    return _side_effect


class TestEncodeFrameSequence:
    """Tests for encode_frame_sequence method."""

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_encode_success(self, mock_run_ffmpeg, store):
        output_path = store.root / "temp-video_silent.mp4"
        mock_run_ffmpeg.side_effect = _write_output(output_path)
        gateway = MediaEncoderGateway(store, timeout=60)

        result = await gateway.encode_frame_sequence(store.root / "frames", 30, 17.6, output_path)

        assert result == output_path
        cmd = mock_run_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-framerate") + 1] == "30"
        assert cmd[cmd.index("-i") + 1].endswith("frames/frame_%06d.png")
        assert cmd[cmd.index("-c:v") + 1] == "libx264"
        assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p"
        assert cmd[cmd.index("-t") + 1] == "17.600"
        assert cmd[-1] == str(output_path)
        assert mock_run_ffmpeg.call_args.kwargs["timeout"] == 60

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_encode_failure_is_fatal(self, mock_run_ffmpeg, store):
        mock_run_ffmpeg.side_effect = CompositionError("FFmpeg command failed")
        gateway = MediaEncoderGateway(store)

        with pytest.raises(PipelineFatalError):
            await gateway.encode_frame_sequence(store.root / "frames", 30, 5.0, store.root / "out.mp4")

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_missing_output_is_fatal(self, mock_run_ffmpeg, store):
        gateway = MediaEncoderGateway(store)

        with pytest.raises(PipelineFatalError, match="produced no output"):
            await gateway.encode_frame_sequence(store.root / "frames", 30, 5.0, store.root / "out.mp4")


class TestMuxAudio:
    """Tests for mux_audio method."""

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_no_audio_copies_silent_video(self, mock_run_ffmpeg, store):
        silent = store.root / "temp-video_silent.mp4"
        silent.write_bytes(b"\x00\x00\x00\x18ftypmp42 silent video bytes")
        output_path = store.root / "lesson.mp4"
        gateway = MediaEncoderGateway(store)

        result = await gateway.mux_audio(silent, MixPlan.no_audio(), output_path)

        assert result == output_path
        assert output_path.read_bytes() == silent.read_bytes()
        mock_run_ffmpeg.assert_not_called()

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_mux_builds_delayed_mix(self, mock_run_ffmpeg, store):
        silent = store.root / "temp-video_silent.mp4"
        silent.write_bytes(b"video")
        output_path = store.root / "lesson.mp4"
        mock_run_ffmpeg.side_effect = _write_output(output_path)
        plan = MixPlan(tracks=[
            MixTrack(scene_index=0, asset_ref="audio/step_001_teacher.wav", delay_seconds=1.0, gain=3.0, duration=3.0),
            MixTrack(scene_index=2, asset_ref="audio/step_003_student1.wav", delay_seconds=9.5, gain=3.0, duration=2.0),
        ])
        gateway = MediaEncoderGateway(store)

        await gateway.mux_audio(silent, plan, output_path)

        cmd = mock_run_ffmpeg.call_args[0][0]
        inputs = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-i"]
        assert inputs == [
            str(silent),
            str(store.path_for("audio/step_001_teacher.wav")),
            str(store.path_for("audio/step_003_student1.wav")),
        ]
        graph = cmd[cmd.index("-filter_complex") + 1]
        assert "adelay=1000|1000" in graph
        assert "adelay=9500|9500" in graph
        assert "amix=inputs=2:duration=longest[audioout]" in graph
        assert cmd[cmd.index("-c:v") + 1] == "copy"
        assert cmd[cmd.index("-c:a") + 1] == "aac"
        assert cmd[cmd.index("-b:a") + 1] == "192k"
        assert "-shortest" in cmd
        assert "[audioout]" in cmd

    @pytest.mark.asyncio
    @patch('modules.compositor.encoder.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_mux_failure_is_fatal(self, mock_run_ffmpeg, store):
        silent = store.root / "temp-video_silent.mp4"
        silent.write_bytes(b"video")
        mock_run_ffmpeg.side_effect = CompositionError("FFmpeg command failed")
        plan = MixPlan(tracks=[
            MixTrack(scene_index=0, asset_ref="audio/step_001_teacher.wav", delay_seconds=1.0, gain=3.0, duration=3.0),
        ])
        gateway = MediaEncoderGateway(store)

        with pytest.raises(PipelineFatalError):
            await gateway.mux_audio(silent, plan, store.root / "lesson.mp4")

        assert silent.exists()

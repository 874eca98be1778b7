import shutil
import subprocess

import pytest

from render_service.core.errors import RenderError
from render_service.services import ffmpeg
from render_service.services.ffmpeg import build_ffmpeg_command, parse_render_request, render_video

PAYLOAD = {"scenes": [{"duration": 1.5, "color": "red"}, {"duration": 2, "color": "#00ff00"}], "width": 320, "height": 240, "fps": 25}


def test_parse_defaults():
    request = parse_render_request({"scenes": [{"duration": 3}]})

    assert request.width == 1280
    assert request.height == 720
    assert request.fps == 30
    assert request.scenes[0].color == "black"
    assert request.total_duration == 3


def test_invalid_scene_is_reported_one_based():
    with pytest.raises(RenderError) as exc_info:
        parse_render_request({"scenes": [{"duration": 1}, {"duration": 0}]})

    assert str(exc_info.value).startswith("invalid scene 2: duration")


def test_invalid_request_fields():
    with pytest.raises(RenderError, match="invalid render request: scenes"):
        parse_render_request({"scenes": []})

    with pytest.raises(RenderError, match="invalid render request: width"):
        parse_render_request({"scenes": [{"duration": 1}], "width": 321})

    with pytest.raises(RenderError, match="invalid render request"):
        parse_render_request(["not", "an", "object"])


def test_build_ffmpeg_command():
    request = parse_render_request(PAYLOAD)

    cmd = build_ffmpeg_command(request, "/tmp/out.mp4")

    assert cmd[0] == "ffmpeg"
    assert cmd[-1] == "/tmp/out.mp4"
    assert "color=c=red:s=320x240:r=25:d=1.5" in cmd
    assert "color=c=#00ff00:s=320x240:r=25:d=2.0" in cmd
    assert "[0:v][1:v]concat=n=2:v=1:a=0[v]" in cmd
    assert cmd.count("lavfi") == 2


def test_render_video_returns_output(tmp_path, monkeypatch):
    def fake_run(cmd, **kwargs):
        with open(cmd[-1], "wb") as f:
            f.write(b"video")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)

    output = render_video(PAYLOAD, str(tmp_path / "work"))

    assert output.startswith(str(tmp_path / "work"))
    assert output.endswith(".mp4")


def test_render_video_ffmpeg_failure(tmp_path, monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, output="", stderr="Invalid argument")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)

    with pytest.raises(RenderError, match="FFmpeg failed: Invalid argument"):
        render_video(PAYLOAD, str(tmp_path))
    assert list(tmp_path.iterdir()) == []


def test_render_video_without_ffmpeg(tmp_path, monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)

    with pytest.raises(RenderError, match="ffmpeg not found"):
        render_video(PAYLOAD, str(tmp_path))


def test_render_video_empty_output(tmp_path, monkeypatch):
    def fake_run(cmd, **kwargs):
        open(cmd[-1], "wb").close()
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)

    with pytest.raises(RenderError, match="empty file"):
        render_video(PAYLOAD, str(tmp_path))


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not available")
def test_render_video_with_ffmpeg(tmp_path):
    """end to end render with the real binary"""
    output = render_video({"scenes": [{"duration": 0.5, "color": "blue"}], "width": 64, "height": 64, "fps": 10}, str(tmp_path))

    with open(output, "rb") as f:
        assert b"ftyp" in f.read(64)

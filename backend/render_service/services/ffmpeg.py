import logging
import subprocess
import uuid
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from render_service.core.config import settings
from render_service.core.errors import RenderError
from render_service.models import RenderRequest

logger = logging.getLogger(__name__)


def parse_render_request(payload: Any) -> RenderRequest:
    """
    validate a raw render payload

    scene problems are reported 1-based, e.g. "invalid scene 2: duration ..."
    """
    try:
        return RenderRequest.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        loc = list(first.get("loc", ()))
        field = ".".join(str(part) for part in loc[2:]) or "scene"
        if len(loc) >= 2 and loc[0] == "scenes" and isinstance(loc[1], int):
            raise RenderError(f"invalid scene {loc[1] + 1}: {field} {first['msg'].lower()}") from e
        where = ".".join(str(part) for part in loc) or "body"
        raise RenderError(f"invalid render request: {where} {first['msg'].lower()}") from e


def build_ffmpeg_command(request: RenderRequest, output_path: str) -> List[str]:
    """one lavfi colour source per scene, joined with the concat filter"""
    size = f"{request.width}x{request.height}"

    cmd = ["ffmpeg", "-hide_banner", "-loglevel", "error"]
    for scene in request.scenes:
        cmd.extend([
            "-f", "lavfi",
            "-i", f"color=c={scene.color}:s={size}:r={request.fps}:d={scene.duration}",
        ])

    inputs = "".join(f"[{i}:v]" for i in range(len(request.scenes)))
    cmd.extend([
        "-filter_complex", f"{inputs}concat=n={len(request.scenes)}:v=1:a=0[v]",
        "-map", "[v]",
        "-c:v", "libx264",           # H.264 video (universally supported)
        "-preset", "veryfast",
        "-crf", "23",
        "-pix_fmt", "yuv420p",       # pixel format for compatibility
        "-movflags", "+faststart",   # enable progressive streaming
        "-y",
        output_path,
    ])
    return cmd


def render_video(payload: Any, work_dir: str) -> str:
    """
    render a payload to an mp4 inside work_dir

    returns: path to the rendered file
    raises: RenderError on invalid payloads or ffmpeg failures
    """
    request = parse_render_request(payload)

    out_dir = Path(work_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    output_path = out_dir / f"{uuid.uuid4().hex}.mp4"

    cmd = build_ffmpeg_command(request, str(output_path))
    logger.info(f"rendering {len(request.scenes)} scenes ({request.total_duration:.1f}s) to {output_path}")
    logger.debug(f"running ffmpeg command: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=settings.RENDER_TIMEOUT_SECONDS)
    except FileNotFoundError as e:
        raise RenderError("ffmpeg not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        output_path.unlink(missing_ok=True)
        raise RenderError(f"render timed out after {settings.RENDER_TIMEOUT_SECONDS}s") from e
    except subprocess.CalledProcessError as e:
        output_path.unlink(missing_ok=True)
        stderr = (e.stderr or "").strip()
        logger.error(f"ffmpeg exited with {e.returncode}: {stderr}")
        raise RenderError(f"FFmpeg failed: {stderr or e.returncode}") from e

    # verify the output file exists and has size > 0
    if not output_path.exists() or output_path.stat().st_size == 0:
        output_path.unlink(missing_ok=True)
        raise RenderError("render produced an empty file")

    logger.info(f"render ready: {output_path} ({output_path.stat().st_size} bytes)")
    return str(output_path)

import os
import threading
import time
import uuid

import pytest
from fastapi.testclient import TestClient

from render_service.core.config import Settings
from render_service.core.errors import RenderError
from render_service.main import create_app

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video-bytes"


class GatedRenderer:
    """
    stand-in renderer that blocks until released

    payload {"fail": "msg"} raises RenderError("msg"), anything else writes a file
    """

    def __init__(self):
        self.release = threading.Event()
        self.calls = []

    def __call__(self, payload, work_dir):
        self.calls.append(payload)
        if not self.release.wait(timeout=5):
            raise RuntimeError("renderer was never released")
        if isinstance(payload, dict) and "fail" in payload:
            raise RenderError(payload["fail"])
        path = os.path.join(work_dir, f"{uuid.uuid4().hex}.mp4")
        with open(path, "wb") as f:
            f.write(VIDEO_BYTES)
        return path


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def wait_until(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture(name="renderer")
def renderer_fixture():
    renderer = GatedRenderer()
    yield renderer
    # let any parked worker threads finish
    renderer.release.set()


@pytest.fixture(name="test_settings")
def settings_fixture(tmp_path):
    test_settings = Settings()
    test_settings.TEMP_DIR = str(tmp_path / "temp")
    test_settings.JOB_TTL_SECONDS = 1800
    test_settings.CLEANUP_INTERVAL_SECONDS = 3600
    test_settings.RENDER_WORKERS = 8
    return test_settings


@pytest.fixture(name="app")
def app_fixture(test_settings, renderer):
    return create_app(settings=test_settings, renderer=renderer)


@pytest.fixture(name="client")
def client_fixture(app):
    with TestClient(app) as client:
        yield client

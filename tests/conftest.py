import io
import zipfile
from unittest.mock import Mock

import pytest

from deployer.app import create_app
from deployer.errors import PublishError


def make_zip(files, dirs=()):
    """Build a zip archive in memory from a {path: content} mapping plus directory names."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name in dirs:
            zf.writestr(name if name.endswith("/") else name + "/", "")
        for path, content in files.items():
            zf.writestr(path, content)
    return buffer.getvalue()


class RecordingPublisher:
    """Records publish calls; raises on the call numbers listed in fail_on."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def publish(self, owner, repo, entry):
        self.calls.append((owner, repo, entry))
        if len(self.calls) in self.fail_on:
            raise PublishError(f"GitHub returned 409 for {entry.relative_path}: conflict")
        return {"content": {"path": entry.relative_path}}


class FakeTracker:
    def __init__(self, projects=None):
        self.visits = []
        self.store = self
        self.projects = projects or []

    def record_visit(self, ip_address, user_agent):
        self.visits.append((ip_address, user_agent))
        return True

    def list_projects(self):
        return self.projects


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def bot():
    return Mock()


@pytest.fixture
def tracker():
    return FakeTracker()


@pytest.fixture
def app(publisher, bot, tracker):
    return create_app(
        config_overrides={"TESTING": True, "JSON_LOGS": False},
        publisher=publisher,
        bot=bot,
        tracker=tracker,
    )


@pytest.fixture
def client(app):
    return app.test_client()

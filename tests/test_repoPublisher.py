"""
Tests for the GitHub publisher and the sequential publish loop.

Sessions are mocked or use a capturing transport adapter; no network access happens.
"""

import base64
from unittest.mock import Mock

import pytest
import requests
from requests.adapters import BaseAdapter

from conftest import RecordingPublisher
from deployer.config import BotIdentity
from deployer.errors import PublishError
from deployer.repoDeployment.archiveReader import ArchiveEntry
from deployer.repoDeployment.repoPublisher import GitHubPublisher, PublishResult, publish_entries

IDENTITY = BotIdentity(name="PaongDev", email="paongdev@example.com")


def response(status_code, body=None):
    resp = Mock(status_code=status_code, text=str(body))
    resp.json.return_value = body if body is not None else {}
    return resp


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    session.get.return_value = response(404, {"message": "Not Found"})
    session.put.return_value = response(201, {"content": {"path": "a.txt"}})
    return session


@pytest.fixture
def github(session):
    return GitHubPublisher(token="ghp_test", identity=IDENTITY, session=session)


class TestGitHubPublisher:

    def test_auth_headers(self, github, session):
        assert session.headers["Authorization"] == "Bearer ghp_test"
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_put_payload(self, github, session):
        github.publish("alice", "demo", ArchiveEntry("dir/b.txt", b"world"))

        url = session.put.call_args.args[0]
        payload = session.put.call_args.kwargs["json"]
        assert url == "https://api.github.com/repos/alice/demo/contents/dir/b.txt"
        assert payload["message"] == "Add dir/b.txt via PaongDev"
        assert base64.b64decode(payload["content"]) == b"world"
        assert payload["committer"] == {"name": "PaongDev", "email": "paongdev@example.com"}
        assert payload["author"] == payload["committer"]
        assert "sha" not in payload

    def test_existing_file_sends_sha(self, github, session):
        session.get.return_value = response(200, {"sha": "abc123", "type": "file"})
        session.put.return_value = response(200, {})

        github.publish("alice", "demo", ArchiveEntry("a.txt", b"hello"))

        assert session.put.call_args.kwargs["json"]["sha"] == "abc123"

    def test_path_is_url_quoted(self, github, session):
        github.publish("alice", "demo", ArchiveEntry("docs/read me.md", b""))

        assert session.put.call_args.args[0].endswith("/contents/docs/read%20me.md")

    def test_custom_api_url_and_timeout(self, session):
        publisher = GitHubPublisher(
            token=None, identity=IDENTITY, api_url="https://ghe.local/api/v3/", timeout=5, session=session
        )

        publisher.publish("alice", "demo", ArchiveEntry("a.txt", b"x"))

        assert session.put.call_args.args[0] == "https://ghe.local/api/v3/repos/alice/demo/contents/a.txt"
        assert session.put.call_args.kwargs["timeout"] == 5
        assert "Authorization" not in session.headers

    @pytest.mark.parametrize("status,message", [
        (401, "Bad credentials"),
        (404, "Not Found"),
        (409, "is at abc but expected def"),
        (403, "API rate limit exceeded"),
    ])
    def test_remote_errors(self, github, session, status, message):
        session.put.return_value = response(status, {"message": message})

        with pytest.raises(PublishError) as exc:
            github.publish("alice", "demo", ArchiveEntry("a.txt", b"hello"))

        assert str(status) in exc.value.message
        assert message in exc.value.message

    def test_network_error(self, github, session):
        session.put.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(PublishError, match="connection reset"):
            github.publish("alice", "demo", ArchiveEntry("a.txt", b"hello"))


class TestPublishEntries:

    def entries(self, n):
        return [ArchiveEntry(f"f{i}.txt", b"x") for i in range(1, n + 1)]

    def test_all_published_in_order(self):
        publisher = RecordingPublisher()

        results = publish_entries(publisher, "alice", "demo", self.entries(3))

        assert [call[2].relative_path for call in publisher.calls] == ["f1.txt", "f2.txt", "f3.txt"]
        assert results == [PublishResult(f"f{i}.txt", ok=True) for i in (1, 2, 3)]

    def test_stops_at_first_failure(self):
        publisher = RecordingPublisher(fail_on={3})

        with pytest.raises(PublishError) as exc:
            publish_entries(publisher, "alice", "demo", self.entries(5))

        # calls 1..K-1 done, K attempted, K+1..N never issued
        assert len(publisher.calls) == 3
        assert exc.value.published == ["f1.txt", "f2.txt"]
        assert exc.value.results[-1].path == "f3.txt"
        assert exc.value.results[-1].ok is False
        assert "409" in exc.value.results[-1].error

    def test_unexpected_error_wrapped(self):
        publisher = Mock()
        publisher.publish.side_effect = [None, ValueError("boom")]

        with pytest.raises(PublishError, match="boom") as exc:
            publish_entries(publisher, "alice", "demo", self.entries(3))

        assert publisher.publish.call_count == 2
        assert exc.value.published == ["f1.txt"]

    def test_no_entries(self):
        publisher = RecordingPublisher()

        assert publish_entries(publisher, "alice", "demo", []) == []
        assert publisher.calls == []


class CapturingAdapter(BaseAdapter):
    """Transport adapter that records the final URL of every request."""

    def __init__(self):
        super().__init__()
        self.sent = []

    def send(self, request, **kwargs):
        self.sent.append((request.method, request.url))
        resp = requests.Response()
        resp.status_code = 404 if request.method == "GET" else 201
        resp._content = b"{}"
        resp.request = request
        return resp

    def close(self):
        pass


class TestPublishTargets:

    @pytest.fixture
    def adapter(self):
        return CapturingAdapter()

    @pytest.fixture
    def real_session(self, adapter):
        session = requests.Session()
        session.mount("https://", adapter)
        return session

    def test_only_contents_endpoint_reached(self, real_session, adapter):
        publisher = GitHubPublisher(token="t", identity=IDENTITY, session=real_session)

        publisher.publish("alice", "demo", ArchiveEntry("dir/b.txt", b"x"))

        assert adapter.sent == [
            ("GET", "https://api.github.com/repos/alice/demo/contents/dir/b.txt"),
            ("PUT", "https://api.github.com/repos/alice/demo/contents/dir/b.txt"),
        ]

    def test_slashes_in_owner_and_repo_stay_in_one_segment(self, real_session, adapter):
        publisher = GitHubPublisher(token="t", identity=IDENTITY, session=real_session)

        publisher.publish("victim/repo/collaborators/x/..", "demo", ArchiveEntry("a.txt", b"x"))

        assert len(adapter.sent) == 2
        for _, url in adapter.sent:
            assert url.startswith("https://api.github.com/repos/victim%2Frepo%2Fcollaborators%2Fx%2F..")
            assert url.endswith("/demo/contents/a.txt")

    @pytest.mark.parametrize("owner,repo,path", [
        ("alice", "demo", "../../../../user/following/attacker"),
        ("alice", "demo", "/user/keys"),
        ("..", "demo", "a.txt"),
        ("alice", ".", "a.txt"),
    ])
    def test_dot_segments_refused_before_any_request(self, real_session, adapter, owner, repo, path):
        publisher = GitHubPublisher(token="t", identity=IDENTITY, session=real_session)

        with pytest.raises(PublishError, match="Refusing"):
            publisher.publish(owner, repo, ArchiveEntry(path, b"x"))

        assert adapter.sent == []

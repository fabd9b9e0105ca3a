import base64
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from deployer.errors import PublishError
from deployer.repoDeployment.archiveReader import is_safe_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishResult:
    path: str
    ok: bool
    error: Optional[str] = None


class GitHubPublisher:
    """Writes one archive entry per call through the GitHub contents API."""

    def __init__(self, token, identity, api_url="https://api.github.com", timeout=None, session=None):
        self.identity = identity
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/vnd.github+json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def contents_url(self, owner, repo, path):
        # owner and repo are single segments; path keeps its slashes but no dot segments
        if owner in ("", ".", "..") or repo in ("", ".", "..") or not is_safe_path(path):
            raise PublishError(f"Refusing to publish {owner}/{repo}:{path}")
        return f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contents/{quote(path)}"

    def existing_sha(self, url):
        resp = self.session.get(url, timeout=self.timeout)
        if resp.status_code == 200:
            body = resp.json()
            # a list means the path is a directory in the repository
            if isinstance(body, dict):
                return body.get("sha")
        return None

    def publish(self, owner, repo, entry):
        url = self.contents_url(owner, repo, entry.relative_path)
        payload = {
            "message": f"Add {entry.relative_path} via {self.identity.name}",
            "content": base64.b64encode(entry.content).decode("ascii"),
            "committer": self.identity.as_dict(),
            "author": self.identity.as_dict(),
        }

        try:
            sha = self.existing_sha(url)
            if sha:
                payload["sha"] = sha
            resp = self.session.put(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PublishError(f"Request for {entry.relative_path} failed: {e}")

        if resp.status_code not in (200, 201):
            raise PublishError(
                f"GitHub returned {resp.status_code} for {entry.relative_path}: {error_message(resp)}"
            )
        return resp.json()


def error_message(resp):
    try:
        return resp.json().get("message", resp.text)
    except ValueError:
        return resp.text


def publish_entries(publisher, owner, repo, entries):
    """
    Publish entries one at a time, in order, stopping at the first failure.

    There is no rollback: when a PublishError is raised, its ``results`` hold
    every entry that was written before the failure plus the failed one, so
    the repository may be partially updated.
    """
    results = []
    for index, entry in enumerate(entries, start=1):
        logger.info(f"Publishing {entry.relative_path} ({index}/{len(entries)}) to {owner}/{repo}")
        try:
            publisher.publish(owner, repo, entry)
        except Exception as e:
            results.append(PublishResult(entry.relative_path, ok=False, error=str(e)))
            logger.error(
                f"Publish failed after {index - 1} of {len(entries)} files: {e}",
                extra={"owner": owner, "repo": repo, "failed_path": entry.relative_path},
            )
            if isinstance(e, PublishError):
                e.results = results
                raise
            raise PublishError(str(e), results=results) from e
        results.append(PublishResult(entry.relative_path, ok=True))
    return results

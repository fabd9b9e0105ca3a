import logging
import re
from dataclasses import dataclass

from deployer.errors import ValidationError
from deployer.repoDeployment.archiveReader import read_archive
from deployer.repoDeployment.repoPublisher import publish_entries
from deployer.repoDeployment.sanitizer import sanitize_fields

logger = logging.getLogger(__name__)

# characters GitHub allows in account and repository names
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class UploadRequest:
    owner_name: str
    repository_name: str
    archive_blob: bytes


def valid_name(name):
    return bool(NAME_PATTERN.match(name)) and name not in (".", "..")


def build_upload_request(fields, archive_blob):
    """Sanitize the form fields and check everything needed for a deploy is present."""
    clean = sanitize_fields(fields)
    owner = clean.get("username", "").strip()
    repo = clean.get("repoName", "").strip()

    if not owner or not repo or not archive_blob:
        raise ValidationError(missing=[
            name for name, value in (("username", owner), ("repoName", repo), ("file", archive_blob))
            if not value
        ])
    if not valid_name(owner) or not valid_name(repo):
        raise ValidationError("Invalid owner or repository name.", owner=owner, repo=repo)
    return UploadRequest(owner_name=owner, repository_name=repo, archive_blob=archive_blob)


def deploy_archive(upload, publisher, max_extracted_bytes=None):
    """Extract the whole archive, then publish each file in turn. Returns per-file results."""
    entries = read_archive(upload.archive_blob, max_extracted_bytes=max_extracted_bytes)
    logger.info(
        f"Deploying {len(entries)} files to {upload.owner_name}/{upload.repository_name}",
        extra={"owner": upload.owner_name, "repo": upload.repository_name},
    )
    results = publish_entries(publisher, upload.owner_name, upload.repository_name, entries)
    logger.info(f"Deployed {len(results)} files to {upload.owner_name}/{upload.repository_name}")
    return results

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass

from deployer.errors import ArchiveFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    relative_path: str
    content: bytes


def is_safe_path(path):
    """True for a relative, forward-slash path with no empty, "." or ".." segment."""
    if not path or "\\" in path or path.startswith("/"):
        return False
    return all(part not in ("", ".", "..") for part in path.split("/"))


def read_archive(blob, max_extracted_bytes=None):
    """
    Decompress a zip blob into a list of ArchiveEntry, one per file.

    Directory entries are skipped. Content is kept as raw bytes so binary
    files survive the trip to the repository unchanged. The whole archive is
    read before returning; entries come back sorted by path because the zip
    central directory order is whatever the tool that built it chose.

    Entry paths must stay inside the repository, and the declared
    uncompressed size of all files together may not exceed
    ``max_extracted_bytes`` when it is set.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(blob)) as zf:
            members = [info for info in zf.infolist() if not info.is_dir()]

            for info in members:
                if not is_safe_path(info.filename):
                    raise ArchiveFormatError(f"Unsafe path in archive: {info.filename!r}")

            total = sum(info.file_size for info in members)
            if max_extracted_bytes is not None and total > max_extracted_bytes:
                raise ArchiveFormatError(
                    f"Archive expands to {total} bytes, more than the {max_extracted_bytes} byte limit"
                )

            # zipfile stops each read at the declared file_size
            entries = [
                ArchiveEntry(relative_path=info.filename, content=zf.read(info))
                for info in members
            ]
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveFormatError(str(e))
    except (EOFError, zlib.error, NotImplementedError, RuntimeError) as e:
        # truncated data, unsupported compression, encrypted members
        raise ArchiveFormatError(f"Could not extract archive: {e}")

    entries.sort(key=lambda entry: entry.relative_path)
    logger.info(f"Extracted {len(entries)} files ({total} bytes) from archive")
    return entries

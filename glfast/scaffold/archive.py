"""Safe extraction of template repository archives (tar + gzip)."""
import gzip
import io
import os
import shutil
import tarfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Optional

from glfast.core.logger import get_logger
from glfast.scaffold.errors import ExtractionError, UnsafeArchivePathError

logger = get_logger(__name__)

# Name of the metadata pseudo-entry written by ``git archive``.
PAX_GLOBAL_HEADER = "pax_global_header"

# Directories keep owner rwx so their children can still be written.
OWNER_RWX = 0o700


def _is_global_header(member: tarfile.TarInfo) -> bool:
    return member.name == PAX_GLOBAL_HEADER or member.type == tarfile.XGLTYPE


def _check_member_path(member: tarfile.TarInfo, destination: Path) -> Path:
    """Resolve where ``member`` would be written, rejecting escapes."""
    name = member.name
    pure = PurePosixPath(name)

    if not name or "\x00" in name:
        raise UnsafeArchivePathError(name, "empty or invalid member name")
    if pure.is_absolute():
        raise UnsafeArchivePathError(name, "absolute paths are not allowed")
    if ".." in pure.parts:
        raise UnsafeArchivePathError(name, "parent directory references are not allowed")

    target = destination.joinpath(*pure.parts)
    base = os.path.realpath(destination)
    if os.path.commonpath([base, os.path.realpath(target)]) != base:
        raise UnsafeArchivePathError(name, "resolves outside the destination directory")
    return target


def _is_metadata_only(payload: bytes) -> bool:
    """True when the tar stream is one pax global header followed by EOF.

    ``tarfile`` consumes global headers while looking for the next member
    and reports an error when that member is the end-of-archive marker.
    """
    try:
        header = tarfile.TarInfo.frombuf(
            payload[:tarfile.BLOCKSIZE], tarfile.ENCODING, "surrogateescape"
        )
    except tarfile.HeaderError:
        return False
    if header.type != tarfile.XGLTYPE:
        return False

    blocks, remainder = divmod(header.size, tarfile.BLOCKSIZE)
    end = tarfile.BLOCKSIZE * (1 + blocks + (1 if remainder else 0))
    return not payload[end:].strip(tarfile.NUL)


def _root_segment(member: tarfile.TarInfo) -> str:
    parts = [part for part in PurePosixPath(member.name).parts if part != "."]
    return parts[0] if parts else ""


def _write_directory(target: Path, mode: int) -> None:
    target.mkdir(parents=True, exist_ok=True)
    target.chmod((mode & 0o777) | OWNER_RWX)


def _write_file(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    source = tar.extractfile(member)
    if source is None:
        raise ExtractionError(f"No data for archive member '{member.name}'")
    with source, open(target, "wb") as handle:
        shutil.copyfileobj(source, handle)
    target.chmod((member.mode & 0o777) | 0o600)


def extract_archive(data: bytes, destination: Path) -> Path:
    """Unpack a tar.gz archive into ``destination``.

    Entries are read sequentially. The leading path segment of the first
    real entry is taken as the archive root; the archive is trusted to keep
    every other entry below it.

    Args:
        data: gzip-compressed tar archive
        destination: Existing directory to unpack into

    Returns:
        ``destination / root``; ``destination`` itself when the archive
        held nothing but the global metadata header

    Raises:
        UnsafeArchivePathError: A member is absolute, contains ``..`` or
            would resolve outside ``destination``
        ExtractionError: The stream is not valid gzip/tar or is truncated,
            the archive has no entries at all, or a file or directory could
            not be written
    """
    destination = Path(destination)
    root: Optional[str] = None
    members = 0
    files = 0
    skipped = 0

    try:
        payload = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise ExtractionError(f"Template archive is not valid gzip data: {exc}") from exc

    try:
        with tarfile.open(fileobj=io.BytesIO(payload), mode="r|") as tar:
            for member in tar:
                members += 1
                if _is_global_header(member):
                    logger.debug("Skipping pax global header")
                    continue

                target = _check_member_path(member, destination)
                if root is None:
                    root = _root_segment(member)

                if member.isdir():
                    _write_directory(target, member.mode)
                elif member.isfile():
                    _write_file(tar, member, target)
                    files += 1
                else:
                    skipped += 1
                    logger.warning(
                        f"Skipping archive member '{member.name}': "
                        f"links and special files are not extracted"
                    )
    except ExtractionError:
        raise
    except (tarfile.TarError, EOFError, zlib.error) as exc:
        if members == 0 and _is_metadata_only(payload):
            logger.warning("Template archive contains no entries besides metadata")
            return destination
        if members == 0 and not payload.strip(tarfile.NUL):
            raise ExtractionError("Template archive contains no entries") from exc
        raise ExtractionError(f"Malformed template archive: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"Failed to extract template archive: {exc}") from exc

    if members == 0:
        raise ExtractionError("Template archive contains no entries")

    if not root:
        logger.warning("Template archive contains no entries besides metadata")
        return destination

    logger.debug(f"Extracted {files} files to {destination / root} ({skipped} skipped)")
    return destination / root

"""Manifest of materialized files ready for a single commit."""
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional

from glfast.core.logger import get_logger
from glfast.scaffold.errors import PathCollisionError

logger = get_logger(__name__)


class FileEncoding(str, Enum):
    """Encoding tag understood by the repository host's commit API."""

    TEXT = "text"
    BASE64 = "base64"


@dataclass(frozen=True)
class MaterializedFile:
    """One file of the new repository.

    Attributes:
        repository_path: Path inside the new repository, without leading slash
        content: Verbatim text, rendered text or base64 text
        encoding: How ``content`` must be interpreted by the host
        source_path: On-disk path the file was produced from
    """

    repository_path: str
    content: str
    encoding: FileEncoding = FileEncoding.TEXT
    source_path: Optional[str] = None

    def to_commit_action(self, action: str = "create") -> Dict[str, str]:
        return {
            "action": action,
            "file_path": self.repository_path,
            "content": self.content,
            "encoding": self.encoding.value,
        }


class Manifest(Mapping):
    """Read-only mapping of repository path to ``MaterializedFile``.

    Iteration follows sorted path order so that two runs over the same tree
    produce identical commit payloads.
    """

    def __init__(self, files: Optional[Dict[str, MaterializedFile]] = None):
        self._files = dict(sorted((files or {}).items()))

    def __getitem__(self, path: str) -> MaterializedFile:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"Manifest({len(self)} files)"

    def to_commit_actions(self, action: str = "create") -> List[Dict[str, str]]:
        """Build the ``actions`` list of a host commit request."""
        return [file.to_commit_action(action) for file in self._files.values()]


class ManifestBuilder:
    """Accumulates files during one walk and hands out the finished manifest.

    Args:
        allow_collisions: Let a later file replace an earlier one with the
            same repository path instead of raising ``PathCollisionError``
    """

    def __init__(self, allow_collisions: bool = False):
        self.allow_collisions = allow_collisions
        self._files: Dict[str, MaterializedFile] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._files)

    def add(self, file: MaterializedFile) -> None:
        if self._closed:
            raise RuntimeError("Manifest has already been built")

        existing = self._files.get(file.repository_path)
        if existing is not None:
            if not self.allow_collisions:
                raise PathCollisionError(
                    file.repository_path,
                    existing.source_path or existing.repository_path,
                    file.source_path or file.repository_path,
                )
            logger.warning(
                f"{file.source_path} replaces {existing.source_path} at {file.repository_path}"
            )
        self._files[file.repository_path] = file

    def build(self) -> Manifest:
        """Close the builder and return its manifest."""
        self._closed = True
        return Manifest(self._files)

"""Operations glfast needs from the remote repository host."""
from abc import ABC, abstractmethod
from typing import Dict

from glfast.scaffold.manifest import Manifest


class RepositoryHost(ABC):
    """A service hosting template and project repositories.

    Projects are addressed by their full path (``group/subgroup/name``).
    """

    @abstractmethod
    def list_group_projects(self, group: str) -> Dict[str, str]:
        """Return ``{project name: description}`` for projects directly in ``group``."""

    @abstractmethod
    def project_exists(self, project_path: str) -> bool:
        """Return True when ``project_path`` exists."""

    @abstractmethod
    def get_project_archive(self, project_path: str) -> bytes:
        """Download the default branch of a project as tar.gz bytes."""

    @abstractmethod
    def create_project(self, name: str, group: str, description: str) -> None:
        """Create a private project ``name`` inside ``group``."""

    @abstractmethod
    def copy_project_variables(self, source: str, target: str) -> int:
        """Copy CI/CD variables; return how many were copied."""

    @abstractmethod
    def enable_runners(self, source: str, target: str) -> int:
        """Enable the source project's specific runners on ``target``; return the count."""

    @abstractmethod
    def create_commit(self, project_path: str, manifest: Manifest, branch: str, message: str) -> None:
        """Commit every manifest entry as a new file in one commit."""

    @abstractmethod
    def create_branch(self, project_path: str, branch: str, ref: str) -> None:
        """Create ``branch`` from ``ref``."""

    @abstractmethod
    def set_default_branch(self, project_path: str, branch: str) -> None:
        """Make ``branch`` the project's default branch."""

    @abstractmethod
    def delete_project(self, project_path: str) -> None:
        """Delete a project."""

"""Repository host integrations."""

from .gitlab import GitLabClient, GitLabError
from .host import RepositoryHost
from .provisioner import ProjectExistsError, ProjectProvisioner, ProvisionResult

__all__ = [
    "GitLabClient",
    "GitLabError",
    "ProjectExistsError",
    "ProjectProvisioner",
    "ProvisionResult",
    "RepositoryHost",
]
